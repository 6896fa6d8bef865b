"""Tests for the Rich terminal reporter."""

from __future__ import annotations

from typing import Any

import pytest
from rich.console import Console

from pkgcov.adapters.coverage.llvm_cov import parse_export
from pkgcov.models.coverage import CategoryCount
from pkgcov.pipelines.coverage import process_export
from pkgcov.reporters.terminal import CLIReporter, _percent_color


@pytest.fixture
def cli_reporter() -> CLIReporter:
    reporter = CLIReporter()
    reporter.console = Console(record=True, width=120, color_system=None)
    return reporter


def _text(reporter: CLIReporter) -> str:
    return reporter.console.export_text()


@pytest.mark.parametrize(
    ("percent", "color"),
    [(100.0, "green"), (80.0, "green"), (79.9, "yellow"), (50.0, "yellow"), (0.0, "red")],
)
def test_percent_color(percent: float, color: str) -> None:
    assert _percent_color(percent) == color


class TestCategorySummary:
    def test_counts_and_percentage(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_category_summary(CategoryCount(count=10, covered=8))
        assert _text(cli_reporter).splitlines() == [
            "   Covered: 8",
            "     Total: 10",
            "Percentage: 80.0",
        ]

    def test_hide_counts(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_category_summary(CategoryCount(count=10, covered=8), show_counts=False)
        assert _text(cli_reporter).splitlines() == ["Percentage: 80.0"]

    def test_hide_percentage(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_category_summary(
            CategoryCount(count=4, covered=1), show_percentage=False
        )
        assert "Percentage" not in _text(cli_reporter)

    def test_empty_category(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_category_summary(CategoryCount())
        assert "Percentage: 0.0" in _text(cli_reporter)


class TestFilesTable:
    def test_lists_scoped_files(
        self, cli_reporter: CLIReporter, sample_document: dict[str, Any]
    ) -> None:
        export = process_export(parse_export(sample_document), {"Sources/"})
        cli_reporter.print_files_table(export, "lines")
        text = _text(cli_reporter)

        assert "/repo/Sources/Core/A.swift" in text
        assert "80.0%" in text
        assert "25.0%" in text
        assert "ATests.swift" not in text

    def test_filename_markup_not_interpreted(self, cli_reporter: CLIReporter) -> None:
        document = {
            "type": "t",
            "version": "v",
            "data": [{"files": [{"filename": "/repo/Sources/[bold]X.swift"}]}],
        }
        export = process_export(parse_export(document), {"Sources/"})
        cli_reporter.print_files_table(export, "lines")
        assert "[bold]X.swift" in _text(cli_reporter)


class TestMessages:
    def test_error_and_success(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_error("Unable to open coverage JSON file: /tmp/x.json")
        cli_reporter.print_success("Configuration is valid!")
        text = _text(cli_reporter)
        assert "✗ Unable to open coverage JSON file: /tmp/x.json" in text
        assert "✓ Configuration is valid!" in text

    def test_messages_with_bracketed_text_print_literally(
        self, cli_reporter: CLIReporter
    ) -> None:
        cli_reporter.print_error('Unable to parse function data:\n{"name": "[/x]"}')
        cli_reporter.print_warning("No files under [bold]Sources")
        cli_reporter.print_info("Scoped coverage written to /tmp/[red]/out.json")
        cli_reporter.print_success("Wrote [/green] report")
        text = _text(cli_reporter)
        assert '"name": "[/x]"' in text
        assert "[bold]Sources" in text
        assert "/tmp/[red]/out.json" in text
        assert "Wrote [/green] report" in text

    def test_output_printed_verbatim(self, cli_reporter: CLIReporter) -> None:
        cli_reporter.print_output("error: [red] not markup")
        assert "error: [red] not markup" in _text(cli_reporter)
