"""Builders that assemble output documents."""

from pkgcov.builders.export import build_export, export_to_dict

__all__ = ["build_export", "export_to_dict"]
