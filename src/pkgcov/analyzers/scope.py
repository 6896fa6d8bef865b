"""Scope filter: keep only the files and functions under included paths.

A path is in scope when it contains any of the configured substrings. The
match is case-sensitive with no normalisation or glob semantics, so
``"Sources/Core"`` matches ``/repo/Sources/Core/Foo.swift`` but not
``/repo/sources/core/Foo.swift``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pkgcov.adapters.coverage.base import MalformedExportError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from pkgcov.models.coverage import CoverageExport, FileEntry, FunctionEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopedEntries:
    """Files and functions that survived the scope filter, in input order."""

    files: tuple[FileEntry, ...] = ()
    functions: tuple[FunctionEntry, ...] = ()


def is_included(filename: str, included_paths: Collection[str]) -> bool:
    """Return True if filename contains any of included_paths."""
    return any(path in filename for path in included_paths)


def filter_files(
    files: Iterable[FileEntry],
    included_paths: Collection[str],
) -> tuple[FileEntry, ...]:
    """Return the files whose filename is in scope."""
    kept: list[FileEntry] = []
    for entry in files:
        if not isinstance(entry.filename, str):
            raise MalformedExportError(
                "Unexpected JSON format. Unable to parse file data", entry=entry.to_dict()
            )
        if is_included(entry.filename, included_paths):
            kept.append(entry)
    return tuple(kept)


def filter_functions(
    functions: Iterable[FunctionEntry],
    included_paths: Collection[str],
) -> tuple[FunctionEntry, ...]:
    """Return the functions with at least one filename in scope."""
    kept: list[FunctionEntry] = []
    for entry in functions:
        if entry.filenames is None:
            raise MalformedExportError(
                "Unexpected JSON format. Unable to parse function data", entry=dict(entry.extra)
            )
        if any(is_included(name, included_paths) for name in entry.filenames):
            kept.append(entry)
    return tuple(kept)


def filter_export(export: CoverageExport, included_paths: Collection[str]) -> ScopedEntries:
    """Select the in-scope files and functions of an export.

    An empty ``included_paths`` selects nothing.

    Raises:
        MalformedExportError: An entry has no filename information at all.
    """
    files = filter_files(export.files, included_paths)
    functions = filter_functions(export.functions, included_paths)
    logger.debug(
        "Scoped %d/%d files and %d/%d functions to %s",
        len(files),
        len(export.files),
        len(functions),
        len(export.functions),
        sorted(included_paths),
    )
    return ScopedEntries(files=files, functions=functions)
