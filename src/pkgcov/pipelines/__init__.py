"""Pipeline orchestration modules."""

from pkgcov.pipelines.coverage import (
    PackageCoveragePipeline,
    PackageCoverageResult,
    process_export,
)

__all__ = [
    "PackageCoveragePipeline",
    "PackageCoverageResult",
    "process_export",
]
