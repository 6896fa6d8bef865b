"""Toolchain adapters for producing and reading coverage exports."""

from pkgcov.adapters.coverage import CoverageAdapter, SwiftPMCoverageAdapter

__all__ = [
    "CoverageAdapter",
    "SwiftPMCoverageAdapter",
]
