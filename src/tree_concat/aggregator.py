"""
Concatenated output writer.
"""

import logging
from pathlib import Path
from typing import Optional, TextIO

HEADER_TEMPLATE = "----- {path} -----\n"
BLOCK_SEPARATOR = "\n\n"


def format_block(relative_path: str, text: str) -> str:
    """Render one output block: header, verbatim text, blank-line separator."""
    return HEADER_TEMPLATE.format(path=relative_path) + text + BLOCK_SEPARATOR


class Aggregator:
    """Write accepted files to a single UTF-8 output document."""

    def __init__(self, output_path: str | Path, logger: Optional[logging.Logger] = None):
        """
        Initialize the aggregator.

        Args:
            output_path: File to create; an existing file is truncated
            logger: Run logger (module logger when None)
        """
        self.output_path = Path(output_path)
        self.logger = logger or logging.getLogger(__name__)
        self.file_handle: Optional[TextIO] = None
        self.blocks_written = 0
        self._seen_paths: set[str] = set()

    def open(self):
        """Create or truncate the output file."""
        self.logger.info(f"Creating output file: {self.output_path}")
        self.file_handle = open(self.output_path, "w", encoding="utf-8", newline="")

    def accept(self, relative_path: str, content: bytes):
        """
        Decode content and append its block to the output.

        Raises:
            UnicodeDecodeError if content is not UTF-8; nothing is written
            ValueError if relative_path was already written
            OSError on write failure
        """
        if self.file_handle is None:
            raise ValueError("Aggregator is not open")
        if relative_path in self._seen_paths:
            raise ValueError(f"Duplicate output block for {relative_path}")

        text = content.decode("utf-8")

        self.file_handle.write(format_block(relative_path, text))
        self._seen_paths.add(relative_path)
        self.blocks_written += 1

    def close(self):
        """Flush and close the output file."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __enter__(self) -> "Aggregator":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
