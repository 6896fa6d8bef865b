"""Base classes and errors for coverage adapters."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from pkgcov.models.coverage import CoverageExport
    from pkgcov.utils.subprocess_runner import SubprocessResult


class CoverageExportError(Exception):
    """Base exception for coverage export failures."""


class MalformedExportError(CoverageExportError):
    """Raised when an export does not match the llvm-cov JSON schema."""

    def __init__(
        self,
        message: str,
        *,
        entry: Any = None,
        source: Path | str | None = None,
    ) -> None:
        """Initialize with a description and the offending raw content.

        Args:
            message: What was wrong with the export.
            entry: The raw JSON value that failed validation, if any.
            source: Path of the export file, when known.
        """
        self.entry = entry
        self.source = source
        details = message
        if source is not None:
            details = f"{details} (in {source})"
        if entry is not None:
            details = f"{details}:\n{json.dumps(entry, indent=2, sort_keys=True, default=str)}"
        super().__init__(details)


class ExportIOError(CoverageExportError):
    """Raised when an export file cannot be read or written."""

    def __init__(self, message: str, *, path: Path | str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class CoverageAdapter(ABC):
    """Abstract base class for toolchains that emit llvm-cov exports.

    Each concrete adapter knows how to run a project's tests with coverage
    enabled, where the toolchain leaves its export, and how to clean up the
    build products afterwards.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Toolchain identifier (e.g. 'swiftpm')."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Primary language (e.g. 'swift')."""

    @abstractmethod
    def detect(self, project_path: Path) -> bool:
        """Return True if this toolchain can be used in project_path."""

    @abstractmethod
    def test_command(self, arguments: Sequence[str] = ()) -> list[str]:
        """Return the command that runs the tests with coverage enabled."""

    @abstractmethod
    async def run_tests(
        self,
        project_path: Path,
        *,
        arguments: Sequence[str] = (),
        timeout: float = 1800.0,
    ) -> SubprocessResult:
        """Run the tests with coverage enabled.

        Raises:
            SubprocessError: The toolchain is missing, the tests fail, or they time out.
        """

    @abstractmethod
    async def find_coverage_file(self, project_path: Path, *, timeout: float = 1800.0) -> Path:
        """Return the path of the export left by the last coverage run."""

    async def run_coverage(
        self,
        project_path: Path,
        *,
        arguments: Sequence[str] = (),
        timeout: float = 1800.0,
    ) -> Path:
        """Run the tests with coverage and return the path of the export.

        Args:
            project_path: Root of the package to test.
            arguments: Extra arguments for the test command.
            timeout: Maximum seconds to wait for each toolchain invocation.

        Returns:
            Path of the llvm-cov JSON export written by the toolchain.
        """
        await self.run_tests(project_path, arguments=arguments, timeout=timeout)
        return await self.find_coverage_file(project_path, timeout=timeout)

    @abstractmethod
    def parse_coverage_file(self, coverage_file: Path) -> CoverageExport:
        """Parse an export file into the typed model."""

    @abstractmethod
    def clean(self, project_path: Path) -> None:
        """Delete the toolchain's build products under project_path."""
