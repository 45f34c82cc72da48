# src/files/transfer.py
"""Move and copy a file into a directory under a new name."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

DEST_DIR_MODE = 0o755


def _prepare_target(dest_dir: str | os.PathLike[str], filename: str) -> Path:
    target_dir = Path(dest_dir)
    target_dir.mkdir(parents=True, exist_ok=True, mode=DEST_DIR_MODE)
    return target_dir / filename


def move_file(
    source: str | os.PathLike[str], dest_dir: str | os.PathLike[str], filename: str,
) -> Path:
    """Move ``source`` to ``dest_dir/filename``, replacing an existing file.

    ``dest_dir`` is created if missing. Works across filesystems.
    """
    if not Path(source).is_file():
        raise FileNotFoundError(f"No such file: {source}")
    target = _prepare_target(dest_dir, filename)
    shutil.move(os.fspath(source), target)
    logger.debug("Moved %s -> %s", source, target)
    return target


def copy_file(
    source: str | os.PathLike[str], dest_dir: str | os.PathLike[str], filename: str,
) -> Path:
    """Copy ``source`` to ``dest_dir/filename``, replacing an existing file."""
    if not Path(source).is_file():
        raise FileNotFoundError(f"No such file: {source}")
    target = _prepare_target(dest_dir, filename)
    shutil.copyfile(source, target)
    return target
