"""
Relic Console Output
=====================

Rich terminal display of a :class:`~relic.core.models.DecodeReport`:
a stream information panel, a class descriptor table and the
normalized objects as highlighted JSON.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.syntax import Syntax

from shared.console import RelicConsole

from relic.core.models import ClassSummary, DecodeReport, StreamInfo


def _class_kind(cls: ClassSummary) -> str:
    if cls.kind == "proxy":
        return "[bright_magenta]proxy[/bright_magenta]"
    if "ENUM" in cls.flags:
        return "[bright_yellow]enum[/bright_yellow]"
    if cls.is_inner_class:
        return "[bright_cyan]inner[/bright_cyan]"
    if cls.is_static_member_class:
        return "[cyan]static member[/cyan]"
    if cls.name.startswith("["):
        return "[dim]array[/dim]"
    return "class"


class RelicConsoleOutput:
    """Rich terminal display for decode reports.

    Usage::

        output = RelicConsoleOutput()
        output.display(report)
    """

    def __init__(self, console: RelicConsole | None = None, version: str = "1.0.0") -> None:
        self._console: RelicConsole = console or RelicConsole()
        self._version = version

    def display(self, report: DecodeReport, *, show_source: bool = False) -> None:
        """Display the complete report.

        Args:
            report: The report to render.
            show_source: Also print the pseudo-Java class source.
        """
        self._console.banner(self._version)
        self.display_stream(report.stream, report)

        if report.classes:
            self.display_classes(report.classes)

        if show_source and report.class_source:
            self.display_source(report.class_source)

        self.display_objects(report)
        self._console.divider()

    def display_stream(self, info: StreamInfo, report: DecodeReport) -> None:
        kinds = ", ".join(f"{kind}: {count}" for kind, count in sorted(report.object_kinds.items()))
        lines = [
            f"[bold]File:[/bold]     {info.path}",
            f"[bold]Size:[/bold]     {info.size:,} bytes",
            f"[bold]Version:[/bold]  {info.version}",
            f"[bold]Objects:[/bold]  {report.object_count} ({kinds or 'none'})",
            f"[bold]Classes:[/bold]  {report.class_count}",
            f"[bold]Handles:[/bold]  {info.handles_assigned} (resets: {info.resets})",
        ]
        if info.sha256:
            lines.append(f"[bold]SHA-256:[/bold]  {info.sha256}")

        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]Stream Information[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_classes(self, classes: list[ClassSummary]) -> None:
        rows = []
        for cls in classes:
            fields = "\n".join(
                f"{f.java_type} {f.name}" for f in cls.fields if not f.is_inner_class_reference
            )
            rows.append((
                f"0x{cls.handle:x}",
                cls.name,
                _class_kind(cls),
                cls.serial_version_uid,
                ", ".join(cls.flags),
                fields or "[dim]-[/dim]",
                cls.super_class or "[dim]-[/dim]",
            ))
        self._console.table(
            "Class Descriptions",
            ["Handle", "Name", "Kind", "serialVersionUID", "Flags", "Fields", "Extends"],
            rows,
            styles=["dim", "bold"],
        )
        self._console.blank()

    def display_source(self, source: str) -> None:
        self._console.section("Reconstructed Classes")
        self._console.rich.print(Syntax(source, "java", theme="monokai", word_wrap=True))
        self._console.blank()

    def display_objects(self, report: DecodeReport) -> None:
        self._console.section("Normalized Objects")
        if not report.objects:
            self._console.info("No top-level objects normalized.")
            return
        self._console.json(report.objects)
        self._console.blank()
