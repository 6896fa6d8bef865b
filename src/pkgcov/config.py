"""Configuration parsing from ``.package-coverage.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from pkgcov.models.coverage import CATEGORY_NAMES

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".package-coverage.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_DEFAULT_INCLUDED_PATHS = ("Sources/",)
_DEFAULT_TIMEOUT = 1800.0


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class ScopeConfig:
    """Which files count towards the scoped coverage numbers."""

    included_paths: tuple[str, ...] = _DEFAULT_INCLUDED_PATHS
    """Path substrings; a file is in scope when its path contains any of them."""

    total_type: str = "lines"
    """Category surfaced in the terminal summary."""


@dataclass(frozen=True)
class RunConfig:
    """How ``swift test`` is invoked."""

    arguments: tuple[str, ...] = ()
    """Extra arguments appended to ``swift test --enable-code-coverage``."""

    skip_run: bool = False
    """Skip running the tests and process the export of an earlier run."""

    dry_run: bool = False
    """Print the test command instead of running it."""

    clean_before: bool = False
    """Delete ``.build`` before running the tests."""

    clean_after: bool = False
    """Delete ``.build`` after processing the export."""

    timeout: float = _DEFAULT_TIMEOUT
    """Seconds allowed for each ``swift`` invocation."""


@dataclass(frozen=True)
class ReportConfig:
    """Reporting and output configuration."""

    show_line_counts: bool = True
    """Print covered and total counts for the selected category."""

    show_percentage: bool = True
    """Print the percentage for the selected category."""

    show_files: bool = False
    """Print a per-file table for the selected category."""

    output: str = ""
    """Path to write the scoped llvm-cov JSON to (empty = do not write)."""


@dataclass(frozen=True)
class PackageCoverageConfig:
    """Complete configuration for one run."""

    root: str
    """Package directory that ``swift test`` runs in."""

    scope: ScopeConfig = field(default_factory=ScopeConfig)
    run: RunConfig = field(default_factory=RunConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    raw: dict[str, Any] = field(default_factory=dict, compare=False)
    """The resolved YAML content, for diagnostics."""

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @property
    def output_path(self) -> Path | None:
        """Resolved output path, relative paths being taken from the root."""
        if not self.report.output:
            return None
        path = Path(self.report.output)
        return path if path.is_absolute() else self.root_path / path


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a mapping (got: {type(value).__name__})")
    return value


def _string_tuple(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(
        isinstance(item, (str, int, float)) and not isinstance(item, bool) for item in value
    ):
        return tuple(str(item) for item in value)
    raise ValueError(f"{key} must be a string or a list of strings (got: {value!r})")


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number (got: {value!r})")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number (got: {value!r})") from e


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _parse_scope_config(raw: dict[str, Any]) -> ScopeConfig:
    scope_raw = _section(raw, "coverage")

    if "included_paths" in scope_raw:
        included = _string_tuple(scope_raw["included_paths"], "coverage.included_paths")
    elif os.environ.get("PKGCOV_INCLUDED_PATHS"):
        included = tuple(
            part.strip()
            for part in os.environ["PKGCOV_INCLUDED_PATHS"].split(",")
            if part.strip()
        )
    else:
        included = _DEFAULT_INCLUDED_PATHS

    return ScopeConfig(
        included_paths=included,
        total_type=str(scope_raw.get("total_type", "lines")).strip().lower(),
    )


def _parse_run_config(raw: dict[str, Any]) -> RunConfig:
    run_raw = _section(raw, "run")
    return RunConfig(
        arguments=_string_tuple(run_raw.get("arguments"), "run.arguments"),
        skip_run=_as_bool(run_raw.get("skip_run", False)),
        dry_run=_as_bool(run_raw.get("dry_run", False)),
        clean_before=_as_bool(run_raw.get("clean_before", False)),
        clean_after=_as_bool(run_raw.get("clean_after", False)),
        timeout=_as_float(run_raw.get("timeout", _DEFAULT_TIMEOUT), "run.timeout"),
    )


def _parse_report_config(raw: dict[str, Any]) -> ReportConfig:
    report_raw = _section(raw, "report")
    return ReportConfig(
        show_line_counts=_as_bool(report_raw.get("show_line_counts", True)),
        show_percentage=_as_bool(report_raw.get("show_percentage", True)),
        show_files=_as_bool(report_raw.get("show_files", False)),
        output=str(report_raw.get("output", os.environ.get("PKGCOV_OUTPUT", ""))),
    )


def load_config(root: str | Path) -> PackageCoverageConfig:
    """Load and parse ``.package-coverage.yml`` from root.

    Falls back to defaults and environment variables when the file is
    missing or incomplete.

    Raises:
        yaml.YAMLError: The file is not valid YAML.
        ValueError: A setting has the wrong type or a section is not a mapping.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        elif parsed is not None:
            logger.warning("Ignoring %s: top level must be a mapping", config_file)

    return PackageCoverageConfig(
        root=str(root_path),
        scope=_parse_scope_config(raw),
        run=_parse_run_config(raw),
        report=_parse_report_config(raw),
        raw=raw,
    )


def apply_overrides(
    config: PackageCoverageConfig,
    *,
    scope: dict[str, Any] | None = None,
    run: dict[str, Any] | None = None,
    report: dict[str, Any] | None = None,
) -> PackageCoverageConfig:
    """Return a copy of config with non-None override values applied per section."""

    def _merge(section: Any, overrides: dict[str, Any] | None) -> Any:
        values = {k: v for k, v in (overrides or {}).items() if v is not None}
        return replace(section, **values) if values else section

    return replace(
        config,
        scope=_merge(config.scope, scope),
        run=_merge(config.run, run),
        report=_merge(config.report, report),
    )


def validate_config(config: PackageCoverageConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.root:
        errors.append("root is required")

    if config.scope.total_type not in CATEGORY_NAMES:
        errors.append(
            f"coverage.total_type must be one of: {', '.join(CATEGORY_NAMES)} "
            f"(got: {config.scope.total_type})"
        )

    # An empty string is a substring of every path and would disable scoping
    if any(not path for path in config.scope.included_paths):
        errors.append("coverage.included_paths must not contain empty strings")

    if config.run.timeout <= 0:
        errors.append(f"run.timeout must be positive (got: {config.run.timeout})")

    return errors
