"""
Relic Console Interface
========================

Rich-powered console abstraction shared by the Relic CLI and its output
renderers: banner, section rules, coloured status messages, tables,
JSON pretty-printing and a status spinner, all with one theme.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import json as _json
from contextlib import contextmanager
from typing import Any, Generator, Sequence

from rich.align import Align
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

_RELIC_THEME = Theme(
    {
        "relic.banner": "bold bright_cyan",
        "relic.section": "bold bright_magenta",
        "relic.success": "bold green",
        "relic.warning": "bold yellow",
        "relic.error": "bold red",
        "relic.info": "bold bright_blue",
        "relic.dim": "dim white",
        "relic.highlight": "bold bright_white",
    }
)

_BANNER_ART = r"""[bright_cyan]
  ____  _____ _     ___ ____
 |  _ \| ____| |   |_ _/ ___|
 | |_) |  _| | |    | | |
 |  _ <| |___| |___ | | |___
 |_| \_\_____|_____|___\____|
[/bright_cyan]"""

_TAGLINE = "Java Serialization Stream Decoder"


class RelicConsole:
    """Unified console interface for Relic output.

    Usage::

        con = RelicConsole()
        con.banner()
        con.section("Classes")
        con.success("Decoded 3 objects")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (library / test mode).
            record: Enable Rich recording for text / HTML export.
        """
        self._console = Console(
            theme=_RELIC_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "1.0.0") -> None:
        subtitle = (
            f"[relic.highlight]{_TAGLINE}[/relic.highlight]\n"
            f"[relic.dim]Version: {version}[/relic.dim]"
        )
        panel = Panel(
            Align.center(Text.from_markup(_BANNER_ART + "\n" + subtitle)),
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(f"  {title}  ", style="relic.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[relic.success][✔] SUCCESS:[/relic.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[relic.warning][⚠] WARNING:[/relic.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[relic.error][✘] ERROR:[/relic.error] {message}")

    def info(self, message: str) -> None:
        self._console.print(f"[relic.info][ℹ] INFO:[/relic.info] {message}")

    # ------------------------------------------------------------------ #
    #  Structured output
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; each cell is stringified.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            tbl.add_column(col_name, style=style)

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    def json(self, data: Any) -> None:
        """Pretty-print *data* as highlighted JSON."""
        self._console.print(JSON(_json.dumps(data, ensure_ascii=False, default=str)))

    @contextmanager
    def status(self, message: str = "Working...") -> Generator[Any, None, None]:
        """Context manager showing a spinner with a status message."""
        with self._console.status(
            f"[relic.info]{message}[/relic.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as status_obj:
            yield status_obj

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        self._console.rule(style=style)
