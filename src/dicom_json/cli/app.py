"""Typer application entrypoint."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .. import __version__
from ..config import ConversionConfig, OutputFormat
from ..errors import ConversionError
from ..logging_config import configure_logging
from ..pipeline import ConversionResult, convert


app = typer.Typer(
    help="Advanced DICOM to JSON converter with comprehensive metadata extraction",
    add_completion=False,
)
console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dicom-json {__version__}")
        raise typer.Exit()


def _print_summary(result: ConversionResult) -> None:
    summary = result.summary()
    table = Table(title="Processing Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total instances", str(summary["total_instances"]))
    table.add_row("Failed files", str(summary["failed_files"]))
    table.add_row("Files with pixel data", str(summary["files_with_pixel_data"]))
    modalities = summary["unique_modalities"]
    table.add_row("Unique modalities", f"{len(modalities)} ({', '.join(modalities)})" if modalities else "0")
    console.print(table)
    for path in result.written:
        console.print(f"Saved {path}")


def _run(input_path: Path, config: ConversionConfig) -> ConversionResult:
    if not config.verbose:
        return convert(input_path, config)

    console.print(f"dicom-json v{__version__}")
    console.print(f"Processing: {input_path}")
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Extracting", total=None)

        def _advance(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        result = convert(input_path, config, progress=_advance)
    _print_summary(result)
    return result


@app.command()
def convert_command(
    input_path: Path = typer.Argument(..., metavar="INPUT", help="DICOM file, directory, or ZIP archive"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output directory (defaults to current directory)"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.COMPREHENSIVE, "--format", "-f", case_sensitive=False, help="Output format"
    ),
    pretty: bool = typer.Option(False, "--pretty", "-p", help="Pretty print JSON output"),
    parallel: bool = typer.Option(False, "--parallel", help="Process files in parallel"),
    include_private: bool = typer.Option(False, "--include-private", help="Include private tags in output"),
    organize_hierarchy: bool = typer.Option(
        False, "--organize-hierarchy", help="Organize output by study/series hierarchy"
    ),
    max_depth: int = typer.Option(10, "--max-depth", min=0, help="Maximum recursion depth for directories"),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, max=128, help="Worker processes for --parallel (defaults to CPU count)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    configure_logging("INFO" if verbose else None, console if verbose else None)
    config = ConversionConfig(
        output_dir=output if output is not None else Path.cwd(),
        output_format=output_format,
        pretty=pretty,
        parallel=parallel,
        include_private=include_private,
        organize_hierarchy=organize_hierarchy,
        max_depth=max_depth,
        workers=workers,
        verbose=verbose,
    )
    try:
        _run(input_path, config)
    except ConversionError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
