"""Loader for llvm-cov ``export -format=text`` JSON documents.

Validates the raw document once and converts it into the typed model in
``pkgcov.models.coverage``. Only the first ``data`` section is read; unknown
keys are ignored.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pkgcov.adapters.coverage.base import ExportIOError, MalformedExportError
from pkgcov.models.coverage import (
    Category,
    CategoryCount,
    CategoryTotals,
    CoverageExport,
    FileEntry,
    FunctionEntry,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_KEY_TYPE = "type"
_KEY_VERSION = "version"
_KEY_DATA = "data"
_KEY_FILES = "files"
_KEY_FUNCTIONS = "functions"
_KEY_TOTALS = "totals"
_KEY_FILENAME = "filename"
_KEY_FILENAMES = "filenames"
_KEY_SUMMARY = "summary"
_KEY_COUNT = "count"
_KEY_COVERED = "covered"
_KEY_NOT_COVERED = "notcovered"

# Keys rebuilt from the typed model rather than passed through
_FILE_MODEL_KEYS = frozenset({_KEY_FILENAME, _KEY_SUMMARY})
_FUNCTION_MODEL_KEYS = frozenset({_KEY_FILENAMES})


# ── Public API ───────────────────────────────────────────────────


def load_export(path: Path) -> CoverageExport:
    """Read and parse an export file.

    Raises:
        ExportIOError: The file cannot be read.
        MalformedExportError: The content is not a valid llvm-cov export.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read coverage export %s: %s", path, e)
        raise ExportIOError("Unable to open coverage JSON file", path=path) from e

    return parse_export_string(content, source=path)


def parse_export_string(
    content: str | bytes,
    *,
    source: Path | str | None = None,
) -> CoverageExport:
    """Parse export JSON text (or UTF-8 bytes) into a ``CoverageExport``."""
    try:
        document = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.error("Invalid JSON for llvm-cov export: %s", e)
        raise MalformedExportError(f"Invalid JSON: {e}", source=source) from e

    return parse_export(document, source=source)


def parse_export(document: Any, *, source: Path | str | None = None) -> CoverageExport:
    """Validate a decoded JSON document and build the typed export."""
    if not isinstance(document, dict):
        raise MalformedExportError(
            "Unexpected JSON format. Export root must be an object", source=source
        )

    format_type = _require_string(document, _KEY_TYPE, source)
    format_version = _require_string(document, _KEY_VERSION, source)

    data_list = document.get(_KEY_DATA)
    if not isinstance(data_list, list) or not data_list:
        raise MalformedExportError(
            "Unexpected JSON format. Export has no data section", source=source
        )
    if len(data_list) > 1:
        logger.debug("Ignoring %d extra data sections", len(data_list) - 1)

    section = data_list[0]
    if not isinstance(section, dict):
        raise MalformedExportError(
            "Unexpected JSON format. Unable to parse data section", entry=section, source=source
        )

    files = tuple(
        _parse_file_entry(raw, source) for raw in _entry_list(section, _KEY_FILES, source)
    )
    functions = tuple(
        _parse_function_entry(raw, source)
        for raw in _entry_list(section, _KEY_FUNCTIONS, source)
    )
    totals = _parse_summary(section.get(_KEY_TOTALS), section, source)

    logger.debug(
        "Parsed llvm-cov export (%s %s): %d files, %d functions",
        format_type,
        format_version,
        len(files),
        len(functions),
    )
    return CoverageExport(
        format_type=format_type,
        format_version=format_version,
        files=files,
        functions=functions,
        totals=totals,
    )


# ── Helpers ──────────────────────────────────────────────────────


def _require_string(document: dict[str, Any], key: str, source: Path | str | None) -> str:
    value = document.get(key)
    if not isinstance(value, str):
        raise MalformedExportError(
            f"Unexpected JSON format. Missing or invalid {key!r}", source=source
        )
    return value


def _entry_list(section: dict[str, Any], key: str, source: Path | str | None) -> list[Any]:
    entries = section.get(key, [])
    if not isinstance(entries, list):
        raise MalformedExportError(
            f"Unexpected JSON format. {key!r} must be an array", entry=entries, source=source
        )
    return entries


def _parse_file_entry(raw: Any, source: Path | str | None) -> FileEntry:
    filename = raw.get(_KEY_FILENAME) if isinstance(raw, dict) else None
    if not isinstance(filename, str):
        raise MalformedExportError(
            "Unexpected JSON format. Unable to parse file data", entry=raw, source=source
        )

    return FileEntry(
        filename=filename,
        summary=_parse_summary(raw.get(_KEY_SUMMARY), raw, source),
        extra={k: v for k, v in raw.items() if k not in _FILE_MODEL_KEYS},
    )


def _parse_function_entry(raw: Any, source: Path | str | None) -> FunctionEntry:
    filenames = raw.get(_KEY_FILENAMES) if isinstance(raw, dict) else None
    if not isinstance(filenames, list):
        raise MalformedExportError(
            "Unexpected JSON format. Unable to parse function data", entry=raw, source=source
        )

    return FunctionEntry(
        filenames=tuple(name for name in filenames if isinstance(name, str)),
        extra={k: v for k, v in raw.items() if k not in _FUNCTION_MODEL_KEYS},
    )


def _parse_summary(raw: Any, owner: Any, source: Path | str | None) -> CategoryTotals:
    """Parse a ``summary``/``totals`` object; absent categories count as zero."""
    if raw is None:
        return CategoryTotals.zero()
    if not isinstance(raw, dict):
        raise MalformedExportError(
            "Unexpected JSON format. Unable to parse summary", entry=owner, source=source
        )

    counts: dict[Category, CategoryCount] = {}
    for category in Category:
        raw_count = raw.get(category.value)
        if raw_count is None:
            continue
        if not isinstance(raw_count, dict):
            raise MalformedExportError(
                f"Unexpected JSON format. Unable to parse {category.value} summary",
                entry=owner,
                source=source,
            )
        counts[category] = CategoryCount(
            count=_count_field(raw_count, _KEY_COUNT, owner, source),
            covered=_count_field(raw_count, _KEY_COVERED, owner, source),
            not_covered=(
                _count_field(raw_count, _KEY_NOT_COVERED, owner, source)
                if category.tracks_not_covered
                else None
            ),
        )
    return CategoryTotals.from_counts(counts)


def _count_field(raw: dict[str, Any], key: str, owner: Any, source: Path | str | None) -> int:
    value = raw.get(key, 0)
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedExportError(
            f"Unexpected JSON format. {key!r} must be a non-negative integer",
            entry=owner,
            source=source,
        )
    return value
