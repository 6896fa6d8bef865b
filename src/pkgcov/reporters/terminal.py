"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from rich.status import Status

    from pkgcov.models.coverage import CategoryCount, CoverageExport

console = Console()

_GOOD_PERCENT = 80.0
_FAIR_PERCENT = 50.0


def _percent_color(percent: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percent >= _GOOD_PERCENT:
        return "green"
    if percent >= _FAIR_PERCENT:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for package-coverage runs."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}", highlight=False)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def create_status(self, message: str) -> Status:
        """Create a Rich Status spinner for long-running operations."""
        return self.console.status(message)

    def print_output(self, text: str) -> None:
        """Print captured tool output verbatim."""
        self.console.print(text, markup=False, highlight=False)

    def print_category_summary(
        self,
        count: CategoryCount,
        *,
        show_counts: bool = True,
        show_percentage: bool = True,
    ) -> None:
        """Print covered/total counts and the percentage for one category.

        The labels are right-aligned so the values line up::

               Covered: 8
                 Total: 10
            Percentage: 80.0
        """
        if show_counts:
            self.console.print(f"   Covered: {count.covered}", highlight=False)
            self.console.print(f"     Total: {count.count}", highlight=False)
        if show_percentage:
            self.console.print(f"Percentage: {count.percent}", highlight=False)

    def print_files_table(self, export: CoverageExport, category: str) -> None:
        """Print a per-file table of one category's coverage."""
        table = Table(title=f"{category} coverage", show_lines=False)
        table.add_column("File", style="cyan")
        table.add_column("Covered", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Percent", justify="right")

        for entry in export.files:
            file_count = entry.summary.select(category)
            color = _percent_color(file_count.percent)
            table.add_row(
                Text(entry.filename),
                str(file_count.covered),
                str(file_count.count),
                f"[{color}]{file_count.percent:.1f}%[/{color}]",
            )

        self.console.print(table)


reporter = CLIReporter()
