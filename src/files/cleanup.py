# src/files/cleanup.py
"""Deleting files by extension and flagging unexpected files."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from opshelpers.files.listing import file_extension, normalize_extension, walk_tree

if TYPE_CHECKING:
    from opshelpers.archive.batch import Reporter

logger = logging.getLogger(__name__)


def delete_files_in_dir(
    directory: str | os.PathLike[str], extensions: Iterable[str],
) -> int:
    """Recursively delete files whose extension is in ``extensions``.

    Extensions are case-insensitive and the leading dot is optional.
    Returns the number of files removed. The first walk or removal error
    propagates.
    """
    wanted = {normalize_extension(ext) for ext in extensions}
    removed = 0
    for entry in walk_tree(directory):
        if entry.is_dir(follow_symlinks=False):
            continue
        if file_extension(entry.name).lower() in wanted:
            os.remove(entry.path)
            removed += 1
    logger.debug("Deleted %d files from %s", removed, directory)
    return removed


def log_files_in_dir(directory: str | os.PathLike[str], reporter: Reporter) -> int:
    """Warn about every file directly inside ``directory``. Returns the count."""
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    count = 0
    for entry in entries:
        if not entry.is_dir():
            reporter.warning("unknown file detected %s", os.path.join(directory, entry.name))
            count += 1
    return count


def log_files_in_dir_recursive(
    directory: str | os.PathLike[str], reporter: Reporter,
) -> int:
    """Warn about every file anywhere below ``directory``. Returns the count."""
    count = 0
    for entry in walk_tree(directory):
        if not entry.is_dir(follow_symlinks=False):
            reporter.warning("unknown file detected %s", entry.path)
            count += 1
    return count
