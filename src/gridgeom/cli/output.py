"""Rich console output helpers for the CLI.

Every command prints the same way: a header, one line per step, then a
summary block that starts with a status line and the path it wrote.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from gridgeom.utils import ShapeProcessingStats

console = Console()

SYM_STEP = "▸"
SYM_OK = "✓"
SYM_ERR = "✗"
SYM_DOT = "·"


def create_progress() -> Progress:
    """Progress bar counting shapes, with elapsed time."""
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    console.print(f"\n[bold]GridGeom[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    console.print(f"\n{SYM_STEP} {message}")


def _print_path(path: str, style: str = "") -> None:
    # Text keeps rich from reading [brackets] in paths as markup
    line = Text("  ")
    line.append(path, style=style)
    console.print(line)


def _counts(*parts: tuple[int, str, str]) -> str:
    """Join (count, label, style) parts with separator dots."""
    rendered = []
    for count, label, style in parts:
        text = f"{count:,} {label}"
        rendered.append(f"[{style}]{text}[/{style}]" if style else text)
    return f"  {f' {SYM_DOT} '.join(rendered)}"


def print_document_info(path: str, shapes: int, vertices: int) -> None:
    """Print the loaded document and its size."""
    _print_path(path)
    console.print(_counts((shapes, "shapes", ""), (vertices, "vertices", "")))


def print_validation(report: dict[int, list[str]], verbose: bool) -> None:
    """Print the problems found per shape.

    Args:
        report: Problems per shape position
        verbose: Also list the shapes without problems
    """
    invalid = sum(1 for problems in report.values() if problems)
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Shape", justify="right")
    table.add_column("Status")
    table.add_column("Problems")

    for index, problems in report.items():
        if problems:
            table.add_row(str(index), f"[red]{SYM_ERR} invalid[/red]", ", ".join(problems))
        elif verbose:
            table.add_row(str(index), f"[green]{SYM_OK} valid[/green]", "")

    if table.row_count:
        console.print(table)

    style = "red" if invalid else "green"
    console.print(f"\n  [{style}]{len(report) - invalid} of {len(report)} shapes valid[/{style}]")


def _format_time(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{int(seconds // 60)}m {seconds % 60:.1f}s"


def print_triangulation(output_path: str, stats: ShapeProcessingStats, verbose: bool) -> None:
    """Print the triangulation summary.

    Args:
        output_path: Document that was written
        stats: Counts and errors of the run
        verbose: Also list the error message of every failed shape
    """
    console.print(
        f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(stats.duration_seconds)}"
    )
    _print_path(output_path, style="bold")
    console.print(
        _counts(
            (stats.processed_count, "shapes", ""),
            (stats.triangles_produced, "triangles", ""),
            (stats.invalid_count, "invalid", "yellow" if stats.invalid_count else "green"),
            (stats.error_count, "errors", "red" if stats.error_count else "green"),
        )
    )
    if verbose:
        for index, message in stats.errors:
            console.print(f"  [red]{SYM_ERR}[/red] shape {index}: {message}")


def print_combination(operation: str, output_path: str, shapes: int, vertices: int) -> None:
    """Print the boolean combination summary."""
    console.print(f"\n[bold green]{SYM_OK} {operation.capitalize()} complete[/bold green]")
    _print_path(output_path, style="bold")
    console.print(_counts((shapes, "shapes", ""), (vertices, "vertices", "")))


def print_error(message: str, details: str | None = None) -> None:
    """Print an error line, with optional details underneath."""
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
