"""Coverage pipeline: scope an llvm-cov export and recompute its totals.

``process_export`` is the pure core (filter, aggregate, rebuild).
``PackageCoveragePipeline`` wraps it with the toolchain steps of a full run:
optional cleanup, running the tests, locating the export, and writing the
scoped document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pkgcov.adapters.coverage.swiftpm import SwiftPMCoverageAdapter
from pkgcov.analyzers.scope import filter_export
from pkgcov.analyzers.totals import aggregate
from pkgcov.builders.export import build_export
from pkgcov.reporters.json_reporter import JSONReporter

if TYPE_CHECKING:
    from collections.abc import Collection
    from pathlib import Path

    from pkgcov.adapters.coverage.base import CoverageAdapter
    from pkgcov.config import PackageCoverageConfig
    from pkgcov.models.coverage import CategoryCount, CoverageExport
    from pkgcov.utils.subprocess_runner import SubprocessResult

logger = logging.getLogger(__name__)


def process_export(export: CoverageExport, included_paths: Collection[str]) -> CoverageExport:
    """Return export restricted to included_paths with totals recomputed.

    Raises:
        MalformedExportError: An entry has no filename information.
    """
    scoped = filter_export(export, included_paths)
    totals = aggregate(scoped.files)
    return build_export(export, scoped.files, scoped.functions, totals)


@dataclass
class PackageCoverageResult:
    """Outcome of a pipeline run."""

    export: CoverageExport | None = None
    """The scoped export; None for a dry run."""

    source_path: Path | None = None
    """The export file that was processed."""

    output_path: Path | None = None
    """Where the scoped export was written, if anywhere."""

    test_run: SubprocessResult | None = None
    """Result of the test invocation; None when the run was skipped."""

    dry_run_command: list[str] | None = None
    """The test command that a dry run would have executed."""

    def summary(self, category: str) -> CategoryCount | None:
        """Return the scoped totals for one category, if an export was produced."""
        if self.export is None:
            return None
        return self.export.totals.select(category)


class PackageCoveragePipeline:
    """Run a package's tests with coverage and produce a scoped export."""

    def __init__(
        self,
        config: PackageCoverageConfig,
        *,
        adapter: CoverageAdapter | None = None,
        coverage_file: Path | None = None,
        json_reporter: JSONReporter | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Resolved run configuration.
            adapter: Toolchain adapter; defaults to SwiftPM.
            coverage_file: Process this export instead of running the tests
                and asking the toolchain for its export.
            json_reporter: Writer for the scoped document.
        """
        self._config = config
        self._adapter = adapter or SwiftPMCoverageAdapter()
        self._coverage_file = coverage_file
        self._json_reporter = json_reporter or JSONReporter()

    async def run(self) -> PackageCoverageResult:
        """Execute the pipeline.

        Raises:
            SubprocessError: Running the tests or locating the export failed.
            CoverageExportError: The export could not be read, parsed, or written.
            OSError: Cleaning the build directory failed.
        """
        config = self._config
        root = config.root_path
        result = PackageCoverageResult()

        if config.run.clean_before:
            self._adapter.clean(root)

        source_path = self._coverage_file
        if source_path is None:
            if not config.run.skip_run:
                if config.run.dry_run:
                    result.dry_run_command = self._adapter.test_command(config.run.arguments)
                    return result
                result.test_run = await self._adapter.run_tests(
                    root, arguments=config.run.arguments, timeout=config.run.timeout
                )
            source_path = await self._adapter.find_coverage_file(root, timeout=config.run.timeout)

        if not config.scope.included_paths:
            logger.warning("No included paths configured; the scoped export will be empty")

        original = self._adapter.parse_coverage_file(source_path)
        result.source_path = source_path
        result.export = process_export(original, config.scope.included_paths)
        logger.info(
            "Scoped %s to %d of %d files",
            source_path,
            len(result.export.files),
            len(original.files),
        )

        output_path = config.output_path
        if output_path is not None:
            result.output_path = self._json_reporter.generate(output_path, result.export)

        if config.run.clean_after:
            self._adapter.clean(root)

        return result
