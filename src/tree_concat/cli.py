import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from tree_concat import __version__
from tree_concat.aggregator import Aggregator
from tree_concat.config import DEFAULT_IGNORE_FILE, DEFAULT_OUTPUT_FILE, RunConfig
from tree_concat.errors import (
    ConfigError,
    PatternError,
    show_pattern_help,
    validate_directory_exists,
    validate_output_path,
)
from tree_concat.logs import DEFAULT_LOG_FILE, close_logging, setup_logging
from tree_concat.matcher import compile_rules
from tree_concat.walker import TreeWalker, WalkStats

app = typer.Typer(help="tree-concat: Concatenate a source tree into one text file, honoring .gitignore rules")
console = Console()
err_console = Console(stderr=True)


def run(config: RunConfig, logger: logging.Logger) -> WalkStats:
    """
    Execute one concatenation run.

    Raises:
        ConfigError before traversal for bad arguments
        PatternError before traversal for a malformed ignore rule
        OSError on any listing, read or write failure
    """
    source = validate_directory_exists(config.source_folder, "Source folder")
    validate_output_path(config.output_file, "output file")

    ruleset = compile_rules(
        source,
        [config.ignore_path],
        logger=logger,
        extra_patterns=config.extra_patterns,
    )

    walker = TreeWalker(source, ruleset, logger=logger, skip_paths=config.skip_paths)
    with Aggregator(config.output_file, logger=logger) as aggregator:
        logger.info(f"Processing files in: {source}")
        stats = walker.walk(aggregator.accept)

    logger.info("Processing completed successfully.")
    return stats


def _version_callback(value: bool):
    if value:
        console.print(f"tree-concat {__version__}")
        raise typer.Exit()


@app.command()
def concat(
    source_folder: Path = typer.Argument(..., help="Source folder path"),
    ignore_file: str = typer.Argument(DEFAULT_IGNORE_FILE, help="Custom ignore file path"),
    log: bool = typer.Option(False, "--log", help=f"Enable logging to {DEFAULT_LOG_FILE}"),
    output: Path = typer.Option(Path(DEFAULT_OUTPUT_FILE), "--output", "-o", help="Output file path"),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", "-e", help="Extra ignore pattern, applied after the ignore file (repeatable)"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Concatenate every non-ignored text file under SOURCE_FOLDER into one document.
    """
    config = RunConfig(
        source_folder=source_folder,
        ignore_file=ignore_file,
        output_file=output,
        log_enabled=log,
        log_file=Path(DEFAULT_LOG_FILE),
        extra_patterns=list(exclude or []),
    )

    try:
        logger = setup_logging(config.log_enabled, config.log_file)
    except OSError as e:
        err_console.print(f"[bold red]Error:[/bold red] Cannot open log file: {e}")
        raise typer.Exit(code=1)

    if not quiet:
        console.print(f"[bold green]Concatenating: {source_folder}[/bold green]\n")

    try:
        stats = run(config, logger)
    except ConfigError:
        # validation helpers already printed the details
        raise typer.Exit(code=1)
    except PatternError as e:
        logger.error(f"Error reading ignore rules: {e}")
        show_pattern_help(e)
        raise typer.Exit(code=1)
    except OSError as e:
        logger.error(f"Error processing files: {e}")
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)
    finally:
        close_logging(logger)

    if quiet:
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Files Written", str(stats.files_written))
    table.add_row("Directories Visited", str(stats.directories_visited))
    table.add_row("Ignored Paths", str(stats.ignored))
    table.add_row("  • No Extension", str(stats.skipped_no_extension))
    table.add_row("  • Non-UTF-8", f"[yellow]{stats.skipped_non_utf8}[/yellow]")
    table.add_row("  • Other", str(stats.skipped_other))

    console.print(table)
    console.print(f"\n[bold green]✓[/bold green] Output written to: {config.output_file}")
    if config.log_enabled:
        console.print(f"[dim]Log written to: {config.log_file}[/dim]")


if __name__ == "__main__":
    app()
