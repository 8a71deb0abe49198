"""
File system traversal with gitignore support.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from tree_concat.matcher import IgnoreRuleSet

Sink = Callable[[str, bytes], None]


class EntryKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Entry:
    """A file system node visited during traversal."""

    path: Path
    relative_path: str
    kind: EntryKind

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def has_extension(self) -> bool:
        return bool(self.path.suffix)


@dataclass
class WalkStats:
    """Counters for one traversal."""

    files_written: int = 0
    directories_visited: int = 0
    ignored: int = 0
    skipped_no_extension: int = 0
    skipped_non_utf8: int = 0
    skipped_other: int = 0


class TreeWalker:
    """
    Depth-first, pre-order traversal of a source tree.

    Directory entries are visited in lexicographic name order. Ignored
    directories are pruned: they are never listed.

    Symlinks are classified the way Path.is_dir()/is_file() classify them,
    so a link to a directory is descended into. There is no cycle guard; a
    symlink loop ends in the OS's own ELOOP error or RecursionError.
    """

    def __init__(
        self,
        root: str | Path,
        ruleset: IgnoreRuleSet,
        logger: Optional[logging.Logger] = None,
        skip_paths: Iterable[Path] = (),
    ):
        self.root = Path(root).resolve()
        self.ruleset = ruleset
        self.logger = logger or logging.getLogger(__name__)
        self.skip_paths = {Path(p).resolve() for p in skip_paths}
        self.stats = WalkStats()

    def _classify(self, path: Path) -> Optional[EntryKind]:
        if path.is_dir():
            return EntryKind.DIRECTORY
        if path.is_file():
            return EntryKind.FILE
        return None

    def _iter_folder(self, folder: Path, relative: str) -> Iterator[Entry]:
        self.logger.debug(f"Processing folder: {folder}")
        self.stats.directories_visited += 1

        # iterdir() order is filesystem dependent
        for path in sorted(folder.iterdir(), key=lambda p: p.name):
            kind = self._classify(path)
            if kind is None:
                self.logger.debug(f"Skipping special or dangling entry: {path}")
                self.stats.skipped_other += 1
                continue

            entry = Entry(
                path=path,
                relative_path=f"{relative}/{path.name}" if relative else path.name,
                kind=kind,
            )
            if self.ruleset.is_ignored(entry):
                self.logger.debug(f"Ignoring path: {path}")
                self.stats.ignored += 1
                continue

            yield entry

            if entry.is_directory:
                self.logger.debug(f"Recursively processing directory: {path}")
                yield from self._iter_folder(path, entry.relative_path)

    def iter_entries(self) -> Iterator[Entry]:
        """
        Yield every non-ignored entry under the root in pre-order.

        Raises:
            OSError if a directory cannot be listed
        """
        if not self.root.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.root}")
        yield from self._iter_folder(self.root, "")

    def walk(self, sink: Sink) -> WalkStats:
        """
        Read each accepted file and hand its bytes to sink.

        Files without an extension are skipped. A sink that raises
        UnicodeDecodeError causes the file to be skipped; any OSError aborts
        the walk.
        """
        for entry in self.iter_entries():
            if entry.is_directory:
                continue

            if not entry.has_extension:
                self.logger.debug(f"Skipping file without extension: {entry.path}")
                self.stats.skipped_no_extension += 1
                continue

            if self.skip_paths and entry.path.resolve() in self.skip_paths:
                self.logger.debug(f"Skipping run output file: {entry.path}")
                self.stats.skipped_other += 1
                continue

            self.logger.debug(f"Processing file: {entry.relative_path}")
            content = entry.path.read_bytes()

            try:
                sink(entry.relative_path, content)
            except UnicodeDecodeError:
                self.logger.warning(f"Skipping non-UTF-8 file: {entry.relative_path}")
                self.stats.skipped_non_utf8 += 1
                continue

            self.stats.files_written += 1

        return self.stats


def walk(
    root: str | Path,
    ruleset: IgnoreRuleSet,
    sink: Sink,
    logger: Optional[logging.Logger] = None,
) -> WalkStats:
    """Walk root with ruleset, passing every accepted file to sink."""
    return TreeWalker(root, ruleset, logger=logger).walk(sink)
