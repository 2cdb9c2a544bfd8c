"""
Relic CLI -- Java Serialization Stream Decoder
===============================================

Click-based command-line interface for Relic.  Decodes one stream file
and shows the result on the console, as JSON on stdout, or as a report
written to disk.

Usage::

    # Console display
    relic /path/to/stream.ser

    # Also print the reconstructed class source
    relic /path/to/stream.ser --classes

    # Full report as JSON on stdout
    relic /path/to/stream.ser --json

    # Write a JSON report or a source file
    relic /path/to/stream.ser --output report.json
    relic /path/to/stream.ser --output classes.java

    # Keep nested classes flattened (Outer$Inner)
    relic /path/to/stream.ser --no-connect

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import json
import sys

import click

from shared.config import RelicConfig
from shared.console import RelicConsole
from shared.logger import RelicLogger

from relic.core.engine import RelicEngine
from relic.core.errors import RelicError
from relic.output.console import RelicConsoleOutput
from relic.output.report import RelicReportGenerator


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------

@click.command("relic")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--classes", "-c",
    "show_classes",
    is_flag=True,
    default=False,
    help="Print the reconstructed class source.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output the full report as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output report path (.json for JSON, anything else for class source).",
)
@click.option(
    "--no-connect",
    is_flag=True,
    default=False,
    help="Do not reconnect nested member classes.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
def relic_cli(
    path: str,
    show_classes: bool,
    json_output: bool,
    output_path: str | None,
    no_connect: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Relic -- Java Serialization Stream Decoder.

    Decode a stream written by java.io.ObjectOutputStream, recover its
    class descriptions and show its objects as plain JSON values.

    PATH is the path to the serialized stream.

    Examples:

    \b
        # Decode and display
        relic session.ser

    \b
        # JSON report on stdout
        relic session.ser --json
    """
    console = RelicConsole(quiet=json_output)

    try:
        config = RelicConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Could not load configuration: {exc}")
        sys.exit(1)

    if no_connect:
        config.relic.connect_member_classes = False

    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = RelicLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )

    engine = RelicEngine(config=config, logger=logger)

    try:
        with console.status(f"Decoding {path}..."):
            report = engine.analyze_sync(path)
    except KeyboardInterrupt:
        console.warning("Decoding interrupted by user.")
        sys.exit(130)
    except (RelicError, OSError) as exc:
        console.error(f"Decoding failed: {exc}")
        sys.exit(1)

    # JSON output mode
    if json_output:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2, default=str))
    else:
        output_display = RelicConsoleOutput(console=console, version=settings.version)
        output_display.display(report, show_source=show_classes)
        console.info(f"Decode Duration: {report.duration_seconds:.3f}s")
        if report.renamed_classes:
            console.info(f"Reconnected member classes: {len(report.renamed_classes)}")

    if output_path:
        report_path = RelicReportGenerator().generate(
            report, output_path, default_format=config.relic.output_format
        )
        console.success(f"Report saved: {report_path}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``relic`` and ``python -m relic``."""
    relic_cli()


if __name__ == "__main__":
    main()
