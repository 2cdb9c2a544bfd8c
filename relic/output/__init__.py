"""
Relic Output Module
====================

Pseudo-source class printing, console display and report generation.
"""

from relic.output.printer import ClassPrinter, print_classes
from relic.output.console import RelicConsoleOutput
from relic.output.report import RelicReportGenerator

__all__ = [
    "ClassPrinter",
    "RelicConsoleOutput",
    "RelicReportGenerator",
    "print_classes",
]
