"""SwiftPM coverage adapter.

Runs ``swift test --enable-code-coverage``, asks SwiftPM where it wrote the
llvm-cov JSON export (``swift test --show-codecov-path``) and parses it.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from pkgcov.adapters.coverage.base import CoverageAdapter
from pkgcov.adapters.coverage.llvm_cov import load_export
from pkgcov.utils.subprocess_runner import SubprocessError, SubprocessResult, run_subprocess

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pkgcov.models.coverage import CoverageExport

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

_PACKAGE_MANIFEST = "Package.swift"
_BUILD_DIR = ".build"
_DEFAULT_TIMEOUT = 1800.0
_SWIFT_TEST = ("swift", "test")
_ENABLE_COVERAGE_FLAG = "--enable-code-coverage"
_SHOW_CODECOV_PATH_FLAG = "--show-codecov-path"


# ── Adapter ──────────────────────────────────────────────────────


class SwiftPMCoverageAdapter(CoverageAdapter):
    """Swift Package Manager adapter using SwiftPM's built-in llvm-cov export."""

    @property
    def name(self) -> str:
        return "swiftpm"

    @property
    def language(self) -> str:
        return "swift"

    def detect(self, project_path: Path) -> bool:
        """Return True when Package.swift exists (Swift package)."""
        return (project_path / _PACKAGE_MANIFEST).is_file()

    def test_command(self, arguments: Sequence[str] = ()) -> list[str]:
        return [*_SWIFT_TEST, _ENABLE_COVERAGE_FLAG, *arguments]

    async def run_tests(
        self,
        project_path: Path,
        *,
        arguments: Sequence[str] = (),
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> SubprocessResult:
        """Run the package's tests with coverage enabled.

        Raises:
            SubprocessError: swift is missing, the tests fail, or they time out.
        """
        logger.info("Running swift tests with coverage in %s", project_path)
        return await run_subprocess(
            self.test_command(arguments),
            cwd=project_path,
            timeout=timeout,
            check=True,
        )

    async def find_coverage_file(
        self,
        project_path: Path,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> Path:
        """Return the export path reported by ``swift test --show-codecov-path``."""
        result = await run_subprocess(
            [*_SWIFT_TEST, _SHOW_CODECOV_PATH_FLAG],
            cwd=project_path,
            timeout=timeout,
            check=True,
        )
        reported = result.stdout.strip()
        if not reported:
            raise SubprocessError("swift test did not report a coverage file path", result=result)

        coverage_path = Path(reported)
        if not coverage_path.is_absolute():
            coverage_path = project_path / coverage_path
        logger.debug("SwiftPM coverage export: %s", coverage_path)
        return coverage_path

    def parse_coverage_file(self, coverage_file: Path) -> CoverageExport:
        return load_export(coverage_file)

    def clean(self, project_path: Path) -> None:
        """Delete the ``.build`` directory, if any."""
        build_dir = project_path / _BUILD_DIR
        if not build_dir.exists():
            logger.debug("Nothing to clean at %s", build_dir)
            return
        logger.info("Removing %s", build_dir)
        shutil.rmtree(build_dir)
