"""Reporters for outputting scoped coverage results."""

from __future__ import annotations

from pkgcov.reporters.json_reporter import JSONReporter
from pkgcov.reporters.terminal import CLIReporter, reporter

__all__ = [
    "CLIReporter",
    "JSONReporter",
    "reporter",
]
