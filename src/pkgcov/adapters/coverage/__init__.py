"""Coverage adapters: export loading and toolchain integration."""

from pkgcov.adapters.coverage.base import (
    CoverageAdapter,
    CoverageExportError,
    ExportIOError,
    MalformedExportError,
)
from pkgcov.adapters.coverage.llvm_cov import load_export, parse_export, parse_export_string
from pkgcov.adapters.coverage.swiftpm import SwiftPMCoverageAdapter

__all__ = [
    "CoverageAdapter",
    "CoverageExportError",
    "ExportIOError",
    "MalformedExportError",
    "SwiftPMCoverageAdapter",
    "load_export",
    "parse_export",
    "parse_export_string",
]
