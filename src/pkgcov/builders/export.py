"""Reassemble a scoped export document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pkgcov.models.coverage import CoverageExport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pkgcov.models.coverage import CategoryTotals, FileEntry, FunctionEntry


def build_export(
    original: CoverageExport,
    files: Iterable[FileEntry],
    functions: Iterable[FunctionEntry],
    totals: CategoryTotals,
) -> CoverageExport:
    """Return a new export with original's type/version and the given data."""
    return CoverageExport(
        format_type=original.format_type,
        format_version=original.format_version,
        files=tuple(files),
        functions=tuple(functions),
        totals=totals,
    )


def export_to_dict(export: CoverageExport) -> dict[str, Any]:
    """Serialize to the llvm-cov JSON shape with a single data section.

    Only ``type``, ``version`` and ``data[0].files/functions/totals`` are
    emitted; anything else the source document carried is not.
    """
    return {
        "type": export.format_type,
        "version": export.format_version,
        "data": [
            {
                "files": [entry.to_dict() for entry in export.files],
                "functions": [entry.to_dict() for entry in export.functions],
                "totals": export.totals.to_dict(),
            }
        ],
    }
