"""Recompute export totals from a set of files.

Totals are a plain sum of each file's per-category summary. The sum is
commutative and associative with ``CategoryTotals.zero()`` as identity, so
partial totals of any partition of the files can be combined in any order.
Percentages are never summed; ``CategoryCount.percent`` derives them from the
summed counts.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import TYPE_CHECKING

from pkgcov.models.coverage import Category, CategoryCount, CategoryTotals

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pkgcov.models.coverage import FileEntry

logger = logging.getLogger(__name__)


def _add_counts(category: Category, left: CategoryCount, right: CategoryCount) -> CategoryCount:
    not_covered: int | None = None
    if category.tracks_not_covered:
        not_covered = (left.not_covered or 0) + (right.not_covered or 0)
    return CategoryCount(
        count=left.count + right.count,
        covered=left.covered + right.covered,
        not_covered=not_covered,
    )


def combine(left: CategoryTotals, right: CategoryTotals) -> CategoryTotals:
    """Return the category-wise sum of two totals."""
    return CategoryTotals.from_counts(
        {
            category: _add_counts(category, left.select(category), right.select(category))
            for category in Category
        }
    )


def aggregate(files: Iterable[FileEntry]) -> CategoryTotals:
    """Sum the summaries of files into export totals.

    An empty sequence yields ``CategoryTotals.zero()``.
    """
    summaries = [entry.summary for entry in files]
    totals = reduce(combine, summaries, CategoryTotals.zero())
    logger.debug(
        "Aggregated %d files: %d/%d lines covered",
        len(summaries),
        totals.lines.covered,
        totals.lines.count,
    )
    return totals
