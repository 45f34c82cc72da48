# src/files/listing.py
"""Directory listing helpers: flat and recursive file discovery.

``walk_tree`` is the single traversal used across the package. It visits
entries depth-first, children in name order, and yields each directory
before its contents. Symlinks are yielded but never followed.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FileInfo(BaseModel):
    """A discovered file: full path plus base name."""

    path: Path
    name: str


def file_extension(name: str) -> str:
    """Return the suffix starting at the last dot of ``name`` (or "")."""
    idx = name.rfind(".")
    return name[idx:] if idx >= 0 else ""


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    if extension and not extension.startswith("."):
        extension = "." + extension
    return extension.lower()


def walk_tree(
    root: str | os.PathLike[str],
    on_error: Callable[[OSError], None] | None = None,
) -> Iterator[os.DirEntry[str]]:
    """Yield every entry below ``root`` (root excluded).

    Args:
        root: Directory to traverse.
        on_error: Called with the OSError when a directory cannot be read.
            If None, the error propagates.
    """
    try:
        with os.scandir(root) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        if on_error is None:
            raise
        on_error(exc)
        return

    for entry in children:
        yield entry
        if entry.is_dir(follow_symlinks=False):
            yield from walk_tree(entry.path, on_error)


def _matches(name: str, extension: str) -> bool:
    return not extension or file_extension(name).lower() == extension


def get_files(directory: str | os.PathLike[str], extension: str = "") -> list[FileInfo]:
    """List regular files directly inside ``directory``.

    Args:
        directory: Directory to scan (subdirectories are not entered).
        extension: Case-insensitive extension filter, leading dot optional.
            Empty string returns every file.

    Raises:
        OSError: If the directory cannot be read.
    """
    ext = normalize_extension(extension)
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    return [
        FileInfo(path=Path(e.path), name=e.name)
        for e in entries
        if not e.is_dir() and _matches(e.name, ext)
    ]


def get_files_recursive(
    directory: str | os.PathLike[str], extension: str = "",
) -> list[FileInfo]:
    """List regular files anywhere below ``directory``; walk errors propagate."""
    ext = normalize_extension(extension)
    files = [
        FileInfo(path=Path(e.path), name=e.name)
        for e in walk_tree(directory)
        if not e.is_dir() and _matches(e.name, ext)
    ]
    logger.debug("Found %d files under %s", len(files), directory)
    return files
