"""JSON reporter: renders scoped exports as llvm-cov JSON.

Output is pretty-printed with sorted keys and a trailing newline so that
successive runs produce reproducible diffs.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pkgcov.adapters.coverage.base import ExportIOError
from pkgcov.builders.export import export_to_dict

if TYPE_CHECKING:
    from pathlib import Path

    from pkgcov.models.coverage import CoverageExport

logger = logging.getLogger(__name__)


class JSONReporter:
    """Serialize a ``CoverageExport`` to llvm-cov JSON text or files."""

    def generate_string(self, export: CoverageExport) -> str:
        """Return the rendered document, including the trailing newline."""
        rendered = json.dumps(export_to_dict(export), indent=2, sort_keys=True, ensure_ascii=False)
        return rendered + "\n"

    def generate(self, output_path: Path, export: CoverageExport) -> Path:
        """Write the rendered document to output_path.

        Args:
            output_path: Destination file; parent directories are created.
            export: The export to write.

        Returns:
            The path written.

        Raises:
            ExportIOError: The file could not be written.
        """
        content = self.generate_string(export)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write llvm-cov JSON to %s: %s", output_path, e)
            raise ExportIOError("Unable to write llvm-cov JSON file", path=output_path) from e
        logger.info("llvm-cov JSON written to %s", output_path)
        return output_path
