"""
Relic Report Generator
=======================

Writes decode reports to disk: a structured JSON report for machine
consumption, or a pseudo-Java source file with a comment header
describing the stream it was reconstructed from.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from relic.core.models import DecodeReport

REPORT_TYPE = "relic_stream_decode"
REPORT_VERSION = "1.0.0"


class RelicReportGenerator:
    """Generate JSON and source reports from a :class:`DecodeReport`.

    Usage::

        gen = RelicReportGenerator()
        gen.generate_json(report, "out/report.json")
        gen.generate_source(report, "out/classes.java")
    """

    def generate(self, report: DecodeReport, output_path: str, default_format: str = "json") -> str:
        """Pick the report format from the file suffix.

        ``.json`` writes JSON and any other suffix writes class source.  A
        path without a suffix uses *default_format* (``"json"`` or
        ``"java"``) and gets the matching suffix appended.
        """
        suffix = Path(output_path).suffix.lower()
        if not suffix:
            suffix = ".json" if default_format == "json" else ".java"
            output_path += suffix
        if suffix == ".json":
            return self.generate_json(report, output_path)
        return self.generate_source(report, output_path)

    def generate_json(self, report: DecodeReport, output_path: str) -> str:
        """Write the JSON report.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(self.to_dict(report), indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        return str(path.resolve())

    def generate_source(self, report: DecodeReport, output_path: str) -> str:
        """Write the reconstructed class source with a provenance header.

        Returns:
            The absolute path of the generated file.
        """
        info = report.stream
        header = [
            f"// Reconstructed from {info.path}",
            f"// sha256: {info.sha256}",
            f"// generated: {datetime.now(timezone.utc).isoformat()}",
            "",
        ]
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(header) + report.class_source, encoding="utf-8")
        return str(path.resolve())

    @staticmethod
    def to_dict(report: DecodeReport) -> dict[str, Any]:
        data = report.model_dump(mode="json")
        return {
            "report_type": REPORT_TYPE,
            "version": REPORT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
