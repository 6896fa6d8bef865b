"""Analyzers that scope and summarize coverage exports."""

from pkgcov.analyzers.scope import (
    ScopedEntries,
    filter_export,
    filter_files,
    filter_functions,
    is_included,
)
from pkgcov.analyzers.totals import aggregate, combine

__all__ = [
    "ScopedEntries",
    "aggregate",
    "combine",
    "filter_export",
    "filter_files",
    "filter_functions",
    "is_included",
]
