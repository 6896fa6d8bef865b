"""Shared fixtures: a small SwiftPM llvm-cov export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


def _count(count: int, covered: int, *, not_covered: int | None = None) -> dict[str, Any]:
    data: dict[str, Any] = {
        "count": count,
        "covered": covered,
        "percent": 100.0 * covered / count if count else 0,
    }
    if not_covered is not None:
        data["notcovered"] = not_covered
    return data


def _summary(lines: tuple[int, int], regions: tuple[int, int, int] = (0, 0, 0)) -> dict[str, Any]:
    return {
        "branches": _count(0, 0, not_covered=0),
        "functions": _count(2, 1),
        "instantiations": _count(2, 1),
        "lines": _count(*lines),
        "regions": _count(regions[0], regions[1], not_covered=regions[2]),
    }


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """Export with two production files, one test file and three functions."""
    return {
        "type": "llvm.coverage.json.export",
        "version": "2.0.1",
        "data": [
            {
                "files": [
                    {
                        "filename": "/repo/Sources/Core/A.swift",
                        "segments": [[1, 1, 4, True, True, False]],
                        "branches": [],
                        "expansions": [],
                        "summary": _summary((10, 8), (6, 4, 2)),
                    },
                    {
                        "filename": "/repo/Sources/Util/B.swift",
                        "segments": [],
                        "branches": [],
                        "expansions": [],
                        "summary": _summary((20, 5), (4, 1, 3)),
                    },
                    {
                        "filename": "/repo/Tests/CoreTests/ATests.swift",
                        "segments": [],
                        "branches": [],
                        "expansions": [],
                        "summary": _summary((5, 5), (2, 2, 0)),
                    },
                ],
                "functions": [
                    {
                        "name": "$s4Core1AV3runyyF",
                        "count": 4,
                        "regions": [[1, 1, 3, 2, 4, 0, 0, 0]],
                        "branches": [],
                        "filenames": ["/repo/Sources/Core/A.swift"],
                    },
                    {
                        "name": "$s4Util1BV7inlinedyyF",
                        "count": 1,
                        "regions": [],
                        "branches": [],
                        "filenames": [
                            "/repo/Tests/CoreTests/ATests.swift",
                            "/repo/Sources/Util/B.swift",
                        ],
                    },
                    {
                        "name": "$s9CoreTests6ATestsC7testRunyyF",
                        "count": 1,
                        "regions": [],
                        "branches": [],
                        "filenames": ["/repo/Tests/CoreTests/ATests.swift"],
                    },
                ],
                "totals": _summary((35, 18), (12, 7, 5)),
            }
        ],
        "unrelated": {"kept": False},
    }


@pytest.fixture
def sample_export_file(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    """The sample export written to disk."""
    path = tmp_path / "codecov" / "MyPackage.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path
