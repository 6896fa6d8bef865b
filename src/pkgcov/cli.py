"""package-coverage CLI: top-level command group."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pkgcov import __version__
from pkgcov.adapters.coverage.base import CoverageExportError
from pkgcov.config import apply_overrides, load_config, validate_config
from pkgcov.models.coverage import CATEGORY_NAMES
from pkgcov.pipelines.coverage import PackageCoveragePipeline
from pkgcov.reporters.terminal import reporter
from pkgcov.utils.subprocess_runner import SubprocessError

if TYPE_CHECKING:
    from collections.abc import Callable

    from pkgcov.config import PackageCoverageConfig
    from pkgcov.pipelines.coverage import PackageCoverageResult

logger = logging.getLogger(__name__)

# CLI option name -> (config section, config field)
_OVERRIDABLE_OPTIONS: dict[str, tuple[str, str]] = {
    "include": ("scope", "included_paths"),
    "total_type": ("scope", "total_type"),
    "show_line_counts": ("report", "show_line_counts"),
    "show_percentage": ("report", "show_percentage"),
    "show_files": ("report", "show_files"),
    "output": ("report", "output"),
    "arguments": ("run", "arguments"),
    "skip_run": ("run", "skip_run"),
    "dry_run": ("run", "dry_run"),
    "clean_before": ("run", "clean_before"),
    "clean_after": ("run", "clean_after"),
    "timeout": ("run", "timeout"),
}


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _config_to_dict(config: PackageCoverageConfig) -> dict[str, Any]:
    """Convert the config to plain data for display."""
    result = asdict(config)
    result.pop("raw", None)
    for section in result.values():
        if isinstance(section, dict):
            for key, value in section.items():
                if isinstance(value, tuple):
                    section[key] = list(value)
    return result


def _command_line_overrides(ctx: click.Context) -> dict[str, dict[str, Any]]:
    """Collect option values given explicitly on the command line, per config section."""
    overrides: dict[str, dict[str, Any]] = {"scope": {}, "run": {}, "report": {}}
    for name, (section, key) in _OVERRIDABLE_OPTIONS.items():
        if name not in ctx.params:
            continue
        if ctx.get_parameter_source(name) is not ParameterSource.COMMANDLINE:
            continue
        value = ctx.params[name]
        # Variadic arguments report COMMANDLINE even when none were given
        if isinstance(value, tuple) and not value:
            continue
        overrides[section][key] = value
    return overrides


def _resolve_config(ctx: click.Context, path: str) -> PackageCoverageConfig:
    try:
        config = load_config(path)
    except (yaml.YAMLError, ValueError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config = apply_overrides(config, **_command_line_overrides(ctx))

    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort
    return config


def _run_pipeline(pipeline: PackageCoveragePipeline) -> PackageCoverageResult:
    try:
        return asyncio.run(pipeline.run())
    except SubprocessError as e:
        if e.result.output:
            reporter.print_output(e.result.output)
        reporter.print_error(f"Unable to run swift tests and gather coverage. {e}")
        raise click.Abort from e
    except CoverageExportError as e:
        reporter.print_error(str(e))
        raise click.Abort from e
    except OSError as e:
        reporter.print_error(f"Unable to clean up build products. {e}")
        raise click.Abort from e


def _display_result(result: PackageCoverageResult, config: PackageCoverageConfig) -> None:
    category = config.scope.total_type
    count = result.summary(category)
    if count is None or result.export is None:
        return

    if not result.export.files:
        reporter.print_warning("No files matched the included paths.")
    elif config.report.show_files:
        reporter.print_files_table(result.export, category)

    reporter.print_category_summary(
        count,
        show_counts=config.report.show_line_counts,
        show_percentage=config.report.show_percentage,
    )

    if result.output_path is not None:
        reporter.print_info(f"Scoped coverage written to {result.output_path}")


def _report_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by commands that produce a scoped export."""
    options = [
        click.option(
            "--path",
            default=".",
            type=click.Path(exists=True, file_okay=False, resolve_path=True),
            help="Package directory (and location of .package-coverage.yml).",
        ),
        click.option(
            "--include",
            "include",
            multiple=True,
            help="Path substring of files to keep. Repeatable; overrides the config file.",
        ),
        click.option(
            "--total-type",
            type=click.Choice(CATEGORY_NAMES, case_sensitive=False),
            default="lines",
            help="Coverage category to summarize.",
        ),
        click.option(
            "--show-line-counts/--hide-line-counts",
            default=True,
            help="Print covered and total counts.",
        ),
        click.option(
            "--show-percentage/--hide-percentage",
            default=True,
            help="Print the coverage percentage.",
        ),
        click.option(
            "--show-files",
            is_flag=True,
            help="Print a per-file table for the selected category.",
        ),
        click.option(
            "--output",
            "-o",
            default="",
            help="Write the scoped llvm-cov JSON export to this file.",
        ),
    ]

    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
@click.version_option(version=__version__, prog_name="package-coverage")
def cli(*, verbose: bool) -> None:
    """package-coverage: test a Swift package and report coverage of its own sources."""
    _configure_logging(verbose=verbose)


@cli.command(context_settings={"ignore_unknown_options": True})
@_report_options
@click.option("--clean-before", is_flag=True, help="Delete .build before running the tests.")
@click.option("--clean-after", is_flag=True, help="Delete .build after processing coverage.")
@click.option(
    "--skip-run",
    is_flag=True,
    help="Do not run the tests; process the export of a previous run.",
)
@click.option("--dry-run", is_flag=True, help="Print the swift test command and exit.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=1800.0,
    help="Seconds allowed for each swift invocation.",
)
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, path: str, **_options: Any) -> None:
    """Run `swift test` with coverage and report coverage of the included paths.

    Extra ARGUMENTS are passed to `swift test`.

    Example:
      package-coverage run --include Sources/ -o coverage.json -- --parallel
    """
    config = _resolve_config(ctx, path)

    pipeline = PackageCoveragePipeline(config)
    if config.run.skip_run or config.run.dry_run:
        result = _run_pipeline(pipeline)
    else:
        with reporter.create_status("Running swift test with code coverage..."):
            result = _run_pipeline(pipeline)

    if result.dry_run_command is not None:
        click.echo(" ".join(result.dry_run_command))
        return

    _display_result(result, config)


@cli.command("filter")
@click.argument(
    "export_file",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
)
@_report_options
@click.pass_context
def filter_command(ctx: click.Context, export_file: Path, path: str, **_options: Any) -> None:
    """Scope an existing llvm-cov JSON EXPORT_FILE to the included paths.

    Example:
      package-coverage filter .build/debug/codecov/MyPackage.json --include Sources/
    """
    config = _resolve_config(ctx, path)
    # Cleaning belongs to test runs only
    config = apply_overrides(config, run={"clean_before": False, "clean_after": False})

    result = _run_pipeline(PackageCoveragePipeline(config, coverage_file=export_file))
    _display_result(result, config)


@cli.group("config")
def config_group() -> None:
    """Inspect `.package-coverage.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Package directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      package-coverage config show --json-output
    """
    try:
        config = load_config(path)
    except (yaml.YAMLError, ValueError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Package directory.",
)
def config_validate(path: str) -> None:
    """Validate `.package-coverage.yml`.

    Example:
      package-coverage config validate
    """
    try:
        config = load_config(path)
    except (yaml.YAMLError, ValueError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    for idx, error in enumerate(errors, start=1):
        reporter.console.print(f"  {idx}. [red]{escape(error)}[/red]")
    raise click.Abort
