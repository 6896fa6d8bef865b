"""Tests for the JSON reporter."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from pkgcov.adapters.coverage.base import ExportIOError
from pkgcov.adapters.coverage.llvm_cov import parse_export, parse_export_string
from pkgcov.pipelines.coverage import process_export
from pkgcov.reporters.json_reporter import JSONReporter


@pytest.fixture
def reporter() -> JSONReporter:
    return JSONReporter()


@pytest.fixture
def scoped_export(sample_document: dict[str, Any]) -> Any:
    return process_export(parse_export(sample_document), {"Sources/"})


def test_generate_string_is_valid_llvm_cov(reporter: JSONReporter, scoped_export: Any) -> None:
    rendered = reporter.generate_string(scoped_export)
    data = json.loads(rendered)

    assert data["type"] == "llvm.coverage.json.export"
    assert data["version"] == "2.0.1"
    assert len(data["data"]) == 1
    assert data["data"][0]["totals"]["lines"] == {
        "count": 30,
        "covered": 13,
        "percent": 100.0 * 13 / 30,
    }


def test_generate_string_is_stable(reporter: JSONReporter, scoped_export: Any) -> None:
    rendered = reporter.generate_string(scoped_export)
    assert rendered.endswith("}\n")
    assert rendered == reporter.generate_string(scoped_export)
    assert rendered.startswith('{\n  "data": [')


def test_output_parses_back(reporter: JSONReporter, scoped_export: Any) -> None:
    reparsed = parse_export_string(reporter.generate_string(scoped_export))
    assert reparsed == scoped_export


def test_non_ascii_filenames_kept(reporter: JSONReporter, sample_document: dict[str, Any]) -> None:
    sample_document["data"][0]["files"][0]["filename"] = "/repo/Sources/Core/Ünïcode.swift"
    export = process_export(parse_export(sample_document), {"Core/"})
    assert "Ünïcode.swift" in reporter.generate_string(export)


def test_generate_writes_file(
    reporter: JSONReporter, scoped_export: Any, tmp_path: Path
) -> None:
    output = tmp_path / "nested" / "dir" / "coverage.json"
    written = reporter.generate(output, scoped_export)

    assert written == output
    assert output.read_text(encoding="utf-8") == reporter.generate_string(scoped_export)


def test_generate_overwrites(reporter: JSONReporter, scoped_export: Any, tmp_path: Path) -> None:
    output = tmp_path / "coverage.json"
    output.write_text("stale", encoding="utf-8")
    reporter.generate(output, scoped_export)
    assert json.loads(output.read_text(encoding="utf-8"))["type"] == "llvm.coverage.json.export"


def test_generate_write_failure(
    reporter: JSONReporter, scoped_export: Any, tmp_path: Path
) -> None:
    output = tmp_path / "coverage.json"
    with (
        patch.object(Path, "write_text", side_effect=OSError("read-only file system")),
        pytest.raises(ExportIOError, match="Unable to write llvm-cov JSON file") as exc_info,
    ):
        reporter.generate(output, scoped_export)
    assert exc_info.value.path == output
