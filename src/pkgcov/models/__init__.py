"""Data models for package-coverage."""

from pkgcov.models.coverage import (
    CATEGORY_NAMES,
    Category,
    CategoryCount,
    CategoryTotals,
    CoverageExport,
    FileEntry,
    FunctionEntry,
    coverage_percent,
)

__all__ = [
    "CATEGORY_NAMES",
    "Category",
    "CategoryCount",
    "CategoryTotals",
    "CoverageExport",
    "FileEntry",
    "FunctionEntry",
    "coverage_percent",
]
