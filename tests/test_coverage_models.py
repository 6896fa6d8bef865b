"""Tests for the typed llvm-cov export model (models/coverage.py)."""

from __future__ import annotations

import pytest

from pkgcov.adapters.coverage.llvm_cov import parse_export
from pkgcov.builders.export import export_to_dict
from pkgcov.models.coverage import (
    CATEGORY_NAMES,
    Category,
    CategoryCount,
    CategoryTotals,
    FileEntry,
    FunctionEntry,
    coverage_percent,
)
from pkgcov.pipelines.coverage import process_export

# ── coverage_percent ─────────────────────────────────────────────


class TestCoveragePercent:
    def test_regular_ratio(self) -> None:
        assert coverage_percent(8, 10) == 80.0

    def test_full_coverage(self) -> None:
        assert coverage_percent(5, 5) == 100.0

    def test_zero_count_is_zero_percent(self) -> None:
        assert coverage_percent(0, 0) == 0.0

    def test_covered_without_count_is_zero_percent(self) -> None:
        assert coverage_percent(3, 0) == 0.0

    def test_covered_above_count_is_accepted(self) -> None:
        assert coverage_percent(12, 10) == pytest.approx(120.0)

    @pytest.mark.parametrize(("covered", "count"), [(10**400, 10**400), (1, 10**400)])
    def test_counts_beyond_float_range_are_zero_percent(self, covered: int, count: int) -> None:
        assert coverage_percent(covered, count) == 0.0

    def test_huge_counts_survive_scoping_and_export(self) -> None:
        document = {
            "type": "llvm.coverage.json.export",
            "version": "2.0.1",
            "data": [
                {
                    "files": [
                        {
                            "filename": "/repo/Sources/Huge.swift",
                            "summary": {"lines": {"count": 10**400, "covered": 10**400}},
                        }
                    ]
                }
            ],
        }
        export = process_export(parse_export(document), {"Sources/"})

        assert export.totals.lines.percent == 0.0
        rendered = export_to_dict(export)
        assert rendered["data"][0]["totals"]["lines"]["percent"] == 0.0
        assert rendered["data"][0]["totals"]["lines"]["count"] == 10**400


# ── Category ─────────────────────────────────────────────────────


class TestCategory:
    def test_order_matches_llvm_cov(self) -> None:
        assert CATEGORY_NAMES == ("branches", "functions", "instantiations", "lines", "regions")

    @pytest.mark.parametrize("category", [Category.BRANCHES, Category.REGIONS])
    def test_tracks_not_covered(self, category: Category) -> None:
        assert category.tracks_not_covered is True

    @pytest.mark.parametrize(
        "category", [Category.FUNCTIONS, Category.INSTANTIATIONS, Category.LINES]
    )
    def test_does_not_track_not_covered(self, category: Category) -> None:
        assert category.tracks_not_covered is False

    def test_parse_accepts_names_case_insensitively(self) -> None:
        assert Category.parse("Lines") is Category.LINES
        assert Category.parse(Category.REGIONS) is Category.REGIONS

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown coverage category"):
            Category.parse("statements")


# ── CategoryCount / CategoryTotals ───────────────────────────────


class TestCategoryCount:
    def test_percent_is_derived(self) -> None:
        assert CategoryCount(count=4, covered=1).percent == 25.0

    def test_to_dict_without_not_covered(self) -> None:
        assert CategoryCount(count=10, covered=8).to_dict() == {
            "count": 10,
            "covered": 8,
            "percent": 80.0,
        }

    def test_to_dict_with_not_covered(self) -> None:
        data = CategoryCount(count=4, covered=2, not_covered=1).to_dict()
        assert data["notcovered"] == 1
        assert data["percent"] == 50.0


class TestCategoryTotals:
    def test_zero_has_not_covered_only_on_branches_and_regions(self) -> None:
        totals = CategoryTotals.zero()
        assert totals.branches.not_covered == 0
        assert totals.regions.not_covered == 0
        assert totals.lines.not_covered is None
        assert totals.functions.not_covered is None
        assert totals.instantiations.not_covered is None

    def test_select_by_enum_and_name(self) -> None:
        totals = CategoryTotals(lines=CategoryCount(count=10, covered=8))
        assert totals.select(Category.LINES) == totals.select("lines")
        assert totals.select("lines").covered == 8

    def test_select_unknown_category(self) -> None:
        with pytest.raises(ValueError):
            CategoryTotals.zero().select("mcdc")

    def test_from_counts_fills_missing_categories(self) -> None:
        totals = CategoryTotals.from_counts({Category.LINES: CategoryCount(count=3, covered=3)})
        assert totals.lines.count == 3
        assert totals.regions == CategoryCount(not_covered=0)

    def test_to_dict_has_all_five_categories(self) -> None:
        data = CategoryTotals.zero().to_dict()
        assert list(data) == list(CATEGORY_NAMES)
        assert all(entry["percent"] == 0.0 for entry in data.values())


# ── Entries ──────────────────────────────────────────────────────


class TestEntries:
    def test_file_entry_to_dict_keeps_extra_keys(self) -> None:
        entry = FileEntry(
            filename="/repo/Sources/A.swift",
            summary=CategoryTotals(lines=CategoryCount(count=2, covered=1)),
            extra={"segments": [[1, 1, 0, True, True, False]]},
        )
        data = entry.to_dict()
        assert data["filename"] == "/repo/Sources/A.swift"
        assert data["segments"] == [[1, 1, 0, True, True, False]]
        assert data["summary"]["lines"]["percent"] == 50.0

    def test_function_entry_to_dict(self) -> None:
        entry = FunctionEntry(
            filenames=("/repo/Sources/A.swift",),
            extra={"name": "$s1A3fooyyF", "count": 3},
        )
        assert entry.name == "$s1A3fooyyF"
        assert entry.to_dict() == {
            "name": "$s1A3fooyyF",
            "count": 3,
            "filenames": ["/repo/Sources/A.swift"],
        }
