"""
Run configuration.
"""

from dataclasses import dataclass, field
from pathlib import Path

from tree_concat.logs import DEFAULT_LOG_FILE

DEFAULT_IGNORE_FILE = ".gitignore"
DEFAULT_OUTPUT_FILE = "output.txt"


@dataclass
class RunConfig:
    """Everything one run needs, as resolved from the command line."""

    source_folder: Path
    ignore_file: str = DEFAULT_IGNORE_FILE
    output_file: Path = Path(DEFAULT_OUTPUT_FILE)
    log_enabled: bool = False
    log_file: Path = Path(DEFAULT_LOG_FILE)
    extra_patterns: list[str] = field(default_factory=list)

    @property
    def ignore_path(self) -> Path:
        return resolve_ignore_path(self.source_folder, self.ignore_file)

    @property
    def skip_paths(self) -> set[Path]:
        """Files the run writes itself and must never read back."""
        paths = {self.output_file.resolve()}
        if self.log_enabled:
            paths.add(self.log_file.resolve())
        return paths


def resolve_ignore_path(source_folder: str | Path, ignore_file: str | Path) -> Path:
    """
    Locate the ignore file.

    The default name is looked up inside the source folder; any other value
    is taken as given, relative to the working directory.
    """
    if str(ignore_file) == DEFAULT_IGNORE_FILE:
        return Path(source_folder) / DEFAULT_IGNORE_FILE
    return Path(ignore_file)
