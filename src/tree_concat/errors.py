"""
User-friendly error messages and validation.
"""

from pathlib import Path

from rich.console import Console

console = Console(stderr=True)


class TreeConcatError(Exception):
    """Base class for fatal tree-concat errors."""

    pass


class ConfigError(TreeConcatError):
    """Invalid or missing command arguments."""

    pass


class PatternError(TreeConcatError):
    """An ignore rule could not be parsed."""

    def __init__(self, message: str, source: str | None = None, line_number: int | None = None):
        self.source = source
        self.line_number = line_number
        if source is not None and line_number is not None:
            message = f"{source}:{line_number}: {message}"
        elif source is not None:
            message = f"{source}: {message}"
        super().__init__(message)


def validate_directory_exists(dirpath: str | Path, dir_description: str) -> Path:
    """
    Validate that a directory exists and is accessible.

    Args:
        dirpath: Path to check
        dir_description: User-friendly description

    Returns:
        Path object if valid

    Raises:
        ConfigError with helpful message
    """
    path = Path(dirpath)

    if not path.exists():
        console.print(f"[red]❌ Error:[/red] {dir_description} does not exist: {dirpath}")
        console.print(f"[dim]Resolved to: {path.absolute()}[/dim]")
        console.print("\n[yellow]💡 Tip:[/yellow] Pass the project root to concatenate, e.g. [dim]tree-concat .[/dim]")
        raise ConfigError(f"{dir_description} not found: {dirpath}")

    if not path.is_dir():
        console.print(f"[red]❌ Error:[/red] {dir_description} must be a folder, got a file: {dirpath}")
        console.print(
            f"\n[yellow]💡 Tip:[/yellow] Use its parent folder [dim]{path.absolute().parent}[/dim] "
            "and an ignore rule to narrow the output"
        )
        raise ConfigError(f"{dirpath} is not a directory")

    return path


def validate_output_path(filepath: str | Path, file_description: str) -> Path:
    """
    Validate that a file can be created at filepath.

    The file itself does not need to exist; its parent directory does.
    """
    path = Path(filepath)

    if path.is_dir():
        console.print(f"[red]❌ Error:[/red] {filepath} is a directory, not a file")
        console.print(f"\n[yellow]💡 Tip:[/yellow] Provide a file name for the {file_description}")
        raise ConfigError(f"{filepath} is a directory")

    parent = path.absolute().parent
    if not parent.is_dir():
        console.print(f"[red]❌ Error:[/red] Directory for {file_description} not found")
        console.print(f"[dim]Looked for: {parent}[/dim]")
        raise ConfigError(f"{file_description} directory not found: {parent}")

    return path


def show_pattern_help(error: PatternError):
    """Show a hint after an ignore rule fails to parse."""
    console.print(f"[red]❌ Error:[/red] Invalid ignore rule: {error}")
    console.print("\n[cyan]Ignore rules use .gitignore syntax:[/cyan]")
    console.print("  • [dim]*.log[/dim]     ignore by glob")
    console.print("  • [dim]/build[/dim]    anchor to the source folder")
    console.print("  • [dim]cache/[/dim]    directories only")
    console.print("  • [dim]!keep.log[/dim] re-include an earlier match")
    console.print("\n[yellow]💡 Tip:[/yellow] Escape a leading '#' or '!' with a backslash\n")
