"""Typed model of an llvm-cov JSON export.

The export is validated once when it is loaded (see
``pkgcov.adapters.coverage.llvm_cov``); every later stage works on these
frozen dataclasses and produces fresh values instead of mutating them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


class Category(Enum):
    """The five measurement dimensions reported by llvm-cov."""

    BRANCHES = "branches"
    FUNCTIONS = "functions"
    INSTANTIATIONS = "instantiations"
    LINES = "lines"
    REGIONS = "regions"

    @property
    def tracks_not_covered(self) -> bool:
        """Return True for categories that also report a ``notcovered`` count."""
        return self in _NOT_COVERED_CATEGORIES

    @classmethod
    def parse(cls, value: Category | str) -> Category:
        """Resolve a category from its enum member or wire name."""
        if isinstance(value, Category):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            names = ", ".join(c.value for c in cls)
            raise ValueError(
                f"Unknown coverage category {value!r} (expected one of: {names})"
            ) from None


_NOT_COVERED_CATEGORIES = frozenset({Category.BRANCHES, Category.REGIONS})

CATEGORY_NAMES: tuple[str, ...] = tuple(c.value for c in Category)


def coverage_percent(covered: int, count: int) -> float:
    """Return ``100 * covered / count``, or 0.0 when that is undefined or not finite."""
    if count == 0:
        return 0.0
    try:
        percent = 100.0 * float(covered) / float(count)
    except OverflowError:
        # Counts beyond float range have no finite ratio
        return 0.0
    if not math.isfinite(percent):
        return 0.0
    return percent


@dataclass(frozen=True)
class CategoryCount:
    """Counts for one category of one file or of the whole export."""

    count: int = 0
    """Total measurable units."""

    covered: int = 0
    """Units exercised at least once."""

    not_covered: int | None = None
    """Third-outcome count; only set for branches and regions."""

    @property
    def percent(self) -> float:
        """Coverage percentage, always derived from ``covered`` and ``count``."""
        return coverage_percent(self.covered, self.count)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using llvm-cov key names."""
        data: dict[str, Any] = {
            "count": self.count,
            "covered": self.covered,
            "percent": self.percent,
        }
        if self.not_covered is not None:
            data["notcovered"] = self.not_covered
        return data


def _empty_count(category: Category) -> CategoryCount:
    return CategoryCount(not_covered=0 if category.tracks_not_covered else None)


@dataclass(frozen=True)
class CategoryTotals:
    """Per-category counts for the five llvm-cov categories."""

    branches: CategoryCount = field(default_factory=lambda: _empty_count(Category.BRANCHES))
    functions: CategoryCount = field(default_factory=lambda: _empty_count(Category.FUNCTIONS))
    instantiations: CategoryCount = field(
        default_factory=lambda: _empty_count(Category.INSTANTIATIONS)
    )
    lines: CategoryCount = field(default_factory=lambda: _empty_count(Category.LINES))
    regions: CategoryCount = field(default_factory=lambda: _empty_count(Category.REGIONS))

    @classmethod
    def zero(cls) -> CategoryTotals:
        """Return all-zero totals (``notcovered`` zeroed on branches and regions)."""
        return cls()

    @classmethod
    def from_counts(cls, counts: Mapping[Category, CategoryCount]) -> CategoryTotals:
        """Build totals from a per-category mapping; missing categories are zero."""
        return cls(
            **{
                category.value: counts.get(category, _empty_count(category))
                for category in Category
            }
        )

    def select(self, category: Category | str) -> CategoryCount:
        """Return the counts for a single category."""
        resolved: Category = Category.parse(category)
        count: CategoryCount = getattr(self, resolved.value)
        return count

    def items(self) -> Iterator[tuple[Category, CategoryCount]]:
        """Iterate ``(category, count)`` pairs in llvm-cov order."""
        for category in Category:
            yield category, self.select(category)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the llvm-cov ``summary``/``totals`` object."""
        return {category.value: count.to_dict() for category, count in self.items()}


@dataclass(frozen=True)
class FileEntry:
    """One compiled source file in the export."""

    filename: str
    """Absolute or repo-relative path; the key matched by the scope filter."""

    summary: CategoryTotals = field(default_factory=CategoryTotals)
    """Counts for this file alone."""

    extra: Mapping[str, Any] = field(default_factory=dict)
    """Remaining llvm-cov keys (segments, branches, expansions, ...) kept verbatim."""

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data["filename"] = self.filename
        data["summary"] = self.summary.to_dict()
        return data


@dataclass(frozen=True)
class FunctionEntry:
    """One compiled function; inlined code may span several files."""

    filenames: tuple[str, ...]
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.extra.get("name", ""))

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data["filenames"] = list(self.filenames)
        return data


@dataclass(frozen=True)
class CoverageExport:
    """Root llvm-cov export document, reduced to its first data section."""

    format_type: str
    """Value of the top-level ``type`` key, passed through verbatim."""

    format_version: str
    """Value of the top-level ``version`` key, passed through verbatim."""

    files: tuple[FileEntry, ...] = ()
    functions: tuple[FunctionEntry, ...] = ()
    totals: CategoryTotals = field(default_factory=CategoryTotals)
