"""
Shared fixtures for building source trees on disk.
"""
from pathlib import Path

import pytest


def write_tree(root: Path, files: dict) -> Path:
    """Create files under root; str values are written as UTF-8, bytes as-is."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
    return root


@pytest.fixture
def make_tree(tmp_path):
    """Build a source tree under tmp_path/src and return its resolved root."""

    def _make(files: dict, name: str = "src") -> Path:
        return write_tree(tmp_path / name, files).resolve()

    return _make
