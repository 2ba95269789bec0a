"""The gridgeom command line: validate, triangulate and combine shape documents."""

from pathlib import Path
from typing import Annotated

import typer

from gridgeom import __version__
from gridgeom.cli.output import (
    console,
    create_progress,
    print_combination,
    print_document_info,
    print_error,
    print_header,
    print_step,
    print_triangulation,
    print_validation,
)
from gridgeom.config import GridGeomSettings, LoggingConfig
from gridgeom.core.boolean import BooleanOperation
from gridgeom.core.processor import ShapeProcessor
from gridgeom.exceptions import GridGeomError, ShapeDocumentError
from gridgeom.io import ShapeWriter

app = typer.Typer(
    name="gridgeom",
    help="Validate, triangulate and combine 45-degree grid shapes.",
    add_completion=False,
    no_args_is_help=True,
)

LogFileOption = Annotated[
    Path | None,
    typer.Option("--log-file", help="Write detailed logs to file"),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Verbose console output"),
]
QuietOption = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Minimal console output"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]GridGeom[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Validate, triangulate and combine 45-degree grid shapes."""


def _make_processor(
    log_file: Path | None, log_level: str, verbose: bool, quiet: bool
) -> ShapeProcessor:
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    settings = GridGeomSettings(
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )
    return ShapeProcessor(settings, quiet=quiet)


def _check_input(path: Path) -> None:
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The file '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)
    if not path.is_file():
        print_error(
            f"Input path is not a file: {path}",
            details="Please provide a path to a JSON shape document.",
        )
        raise typer.Exit(code=1)


@app.command()
def validate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to a JSON shape document", show_default=False),
    ],
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Report validity problems of every shape in a document.

    Exits with code 1 if any shape is invalid.

    Example:
        gridgeom validate shapes.json
    """
    _check_input(input_file)
    processor = _make_processor(log_file, log_level, verbose, quiet)

    try:
        if not quiet:
            print_header(__version__)
            print_step("Loading shapes")
        group = processor.load(input_file)
        if not quiet:
            print_document_info(str(input_file), group.num_shapes, group.num_vertices)
            print_step("Validating")

        report = processor.validate(group)
        if not quiet:
            print_validation(report, verbose)
    except ShapeDocumentError as e:
        print_error(f"Could not load shapes: {e.reason}")
        raise typer.Exit(code=1)

    if any(report.values()):
        raise typer.Exit(code=1)


@app.command()
def triangulate(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to a JSON shape document", show_default=False),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {name}-triangulated.json)",
        ),
    ] = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Triangulate every valid shape in a document.

    Invalid shapes are skipped and shapes that fail to triangulate are
    reported; the rest are written with their triangles.

    Example:
        gridgeom triangulate shapes.json -o triangles.json
    """
    _check_input(input_file)
    processor = _make_processor(log_file, log_level, verbose, quiet)
    output_path = output or ShapeWriter.get_result_path(input_file, "triangulated")

    try:
        if quiet:
            stats = processor.process(input_file, output_path)
        else:
            print_header(__version__)
            print_step("Triangulating")
            with create_progress() as progress:
                task_id = progress.add_task("Triangulating", total=None)

                def update_progress(completed: int, total: int, _success: bool) -> None:
                    progress.update(task_id, completed=completed, total=total)

                stats = processor.process(input_file, output_path, update_progress)

            print_triangulation(str(output_path), stats, verbose)
    except ShapeDocumentError as e:
        print_error(f"Could not load shapes: {e.reason}")
        raise typer.Exit(code=1)
    except GridGeomError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def combine(
    first: Annotated[
        Path,
        typer.Argument(help="Document for the first operand", show_default=False),
    ],
    second: Annotated[
        Path,
        typer.Argument(help="Document for the second operand", show_default=False),
    ],
    op: Annotated[
        BooleanOperation,
        typer.Option("--op", help="Boolean operation (first OP second)"),
    ] = BooleanOperation.UNION,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {first}-{op}.json)",
        ),
    ] = None,
    log_file: LogFileOption = None,
    log_level: LogLevelOption = "WARNING",
    verbose: VerboseOption = False,
    quiet: QuietOption = False,
) -> None:
    """Combine the shapes of two documents with a boolean operation.

    Example:
        gridgeom combine a.json b.json --op subtract -o a-minus-b.json
    """
    _check_input(first)
    _check_input(second)
    processor = _make_processor(log_file, log_level, verbose, quiet)
    output_path = output or ShapeWriter.get_result_path(first, op.value)

    try:
        if not quiet:
            print_header(__version__)
            print_step(f"Combining ({op.value})")
        result = processor.combine(first, second, op, output_path)
    except ShapeDocumentError as e:
        print_error(f"Could not load shapes: {e.reason}")
        raise typer.Exit(code=1)
    except GridGeomError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if not quiet:
        print_combination(op.value, str(output_path), result.num_shapes, result.num_vertices)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
