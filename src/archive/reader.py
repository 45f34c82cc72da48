# src/archive/reader.py
"""Archive reader: stream a gzip-compressed tar onto the filesystem.

Entries are consumed in stream order ("r|gz"), one destination file open at
a time. Extraction is not transactional: whatever was written before a
failure stays on disk.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import zlib
from pathlib import Path
from typing import BinaryIO

from opshelpers.archive.errors import ArchiveFormatError, UnsafeArchivePathError
from opshelpers.archive.models import ArchiveEntry

logger = logging.getLogger(__name__)

# Mode for directories created from directory entries, whatever was archived.
DIR_MODE = 0o755

_PERMISSION_BITS = 0o7777


def _target_for(root: Path, name: str, *, allow_root: bool = False) -> Path:
    """Map an entry name under ``root``, rejecting escapes.

    An empty name is what tarfile leaves of an absolute "/" entry. A name
    that resolves to ``root`` itself (".", "./") is only accepted for
    directory entries.
    """
    if not name or name.startswith(("/", "\\")):
        raise UnsafeArchivePathError(f"Absolute path in archive: {name!r}")
    target = root / name
    resolved = target.resolve()
    if resolved == root:
        if not allow_root:
            raise UnsafeArchivePathError(f"Entry names the destination itself: {name!r}")
    elif root not in resolved.parents:
        raise UnsafeArchivePathError(f"Entry escapes destination: {name!r}")
    return target


def _extract_directory(target: Path) -> bool:
    """Create ``target`` unless present. Returns True if it was created."""
    if target.exists():
        return False
    target.mkdir(parents=True, mode=DIR_MODE)
    os.chmod(target, DIR_MODE)
    return True


def _extract_file(tar: tarfile.TarFile, member: tarfile.TarInfo, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    src = tar.extractfile(member)
    if src is None:
        raise ArchiveFormatError(f"No content stream for {member.name!r}")
    with open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.chmod(target, member.mode & _PERMISSION_BITS)


def extract_archive(
    stream: BinaryIO, dest_dir: str | os.PathLike[str],
) -> list[ArchiveEntry]:
    """Extract a gzip-compressed tar stream under ``dest_dir``.

    Directory entries are created with DIR_MODE when missing and left alone
    otherwise. Regular files are created or truncated and get the archived
    permission bits. Other entry kinds (links, devices, fifos) are skipped.

    Args:
        stream: Readable binary stream positioned at the gzip header.
        dest_dir: Extraction root, created if missing.

    Returns:
        The entries written, in archive order.

    Raises:
        ArchiveFormatError: Not gzip, corrupt or truncated tar data, or an
            unsafe entry path.
        OSError: A directory or file could not be created or written.
    """
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()

    extracted: list[ArchiveEntry] = []
    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as tar:
            for member in tar:
                if member.isdir():
                    target = _target_for(root, member.name, allow_root=True)
                    _extract_directory(target)
                    extracted.append(
                        ArchiveEntry(path=member.name, kind="directory", mode=DIR_MODE)
                    )
                elif member.isreg():
                    target = _target_for(root, member.name)
                    _extract_file(tar, member, target)
                    extracted.append(
                        ArchiveEntry(
                            path=member.name, kind="file", size=member.size,
                            mode=member.mode & _PERMISSION_BITS,
                        )
                    )
                else:
                    logger.debug("Skipping %s (tar type %r)", member.name, member.type)
    except (tarfile.TarError, zlib.error, EOFError) as exc:
        raise ArchiveFormatError(f"Invalid tar.gz stream: {exc}") from exc

    logger.debug("Extracted %d entries into %s", len(extracted), dest)
    return extracted


def extract_archive_file(
    archive_path: str | os.PathLike[str], dest_dir: str | os.PathLike[str],
) -> list[ArchiveEntry]:
    """Open ``archive_path`` and extract it under ``dest_dir``."""
    with open(archive_path, "rb") as fh:
        return extract_archive(fh, dest_dir)
