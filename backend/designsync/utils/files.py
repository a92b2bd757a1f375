"""Filesystem walks and folder helpers.

Walks are pure: each call returns a fresh tuple of matches instead of
appending to a caller-owned accumulator.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every file under ``root`` depth-first, entries in name order."""
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            yield from walk_files(path)
        elif entry.is_file(follow_symlinks=False):
            yield path


def find_files(root: Path, suffixes: Iterable[str]) -> tuple[Path, ...]:
    """All files under ``root`` whose lowercased suffix is in ``suffixes``."""
    wanted = {s.lower() for s in suffixes}
    return tuple(p for p in walk_files(root) if p.suffix.lower() in wanted)


def find_file_by_name(root: Path, name: str) -> Path | None:
    """First file named exactly ``name`` in a depth-first walk of ``root``."""
    for path in walk_files(root):
        if path.name == name:
            return path
    return None


def empty_dir(path: Path) -> None:
    """Create ``path`` if needed and remove everything inside it."""
    path.mkdir(parents=True, exist_ok=True)
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def remove_path(path: Path) -> None:
    """Remove a file or directory tree if it exists."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path, ignore_errors=True)
    elif path.exists() or path.is_symlink():
        try:
            path.unlink()
        except FileNotFoundError:
            pass
