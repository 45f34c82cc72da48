# src/archive/writer.py
"""Archive writer: build a gzip-compressed tar from a directory tree.

Building and purging are separate steps:

    report = build_archive("out.tar.gz", "spool/")
    purge_archived_sources(report)

``create_archive`` composes both and is what most callers want: the source
tree's regular files are consumed by archiving, directories stay in place.
"""

from __future__ import annotations

import logging
import os
import stat
import tarfile
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from opshelpers.archive.errors import ArchiveError
from opshelpers.archive.models import ArchiveEntry, ArchiveReport, EntryOutcome
from opshelpers.files.listing import walk_tree

if TYPE_CHECKING:
    from opshelpers.archive.batch import Reporter

logger = logging.getLogger(__name__)


def _resolve_roots(
    source_root: Path, relative_root: str | os.PathLike[str] | None,
) -> Path:
    """Return the directory entry names are computed against."""
    if not source_root.is_dir():
        raise ArchiveError(f"Source root is not a directory: {source_root}")
    if relative_root is None or str(relative_root) == "":
        return source_root
    rel = Path(relative_root)
    try:
        source_root.resolve().relative_to(rel.resolve())
    except ValueError:
        raise ArchiveError(
            f"Relative root {rel} is not an ancestor of source root {source_root}"
        ) from None
    return rel


def _entry_name(path: str, relative_root: Path) -> str:
    return Path(os.path.relpath(path, relative_root)).as_posix()


def build_archive(
    archive_path: str | os.PathLike[str],
    source_root: str | os.PathLike[str],
    relative_root: str | os.PathLike[str] | None = None,
    *,
    fail_fast: bool = False,
) -> ArchiveReport:
    """Write every directory and regular file under ``source_root`` to a tar.gz.

    Args:
        archive_path: Destination file. Its parent directory must exist.
        source_root: Directory to archive.
        relative_root: Directory entry names are relative to. Defaults to
            ``source_root``; must be ``source_root`` or one of its ancestors.
        fail_fast: Raise on the first per-entry failure instead of recording
            it and moving on.

    Returns:
        ArchiveReport with one outcome per visited filesystem object.

    Raises:
        ArchiveError: Bad roots, a per-entry failure with ``fail_fast``, or a
            failure after an entry header was already written.
        OSError: The archive file cannot be created.
    """
    archive = Path(archive_path)
    source = Path(source_root)
    rel_root = _resolve_roots(source, relative_root)
    archive_abs = archive.resolve()

    report = ArchiveReport(
        archive_path=archive, source_root=source, relative_root=rel_root,
    )

    def record_failure(path: str, exc: OSError | str) -> None:
        if fail_fast:
            raise ArchiveError(f"Failed to archive {path}: {exc}")
        logger.warning("Skipping %s: %s", path, exc)
        report.entries.append(
            EntryOutcome(source_path=Path(path), status="failed", error=str(exc))
        )

    def on_walk_error(exc: OSError) -> None:
        record_failure(exc.filename or str(source), exc)

    def add_directory(path: str) -> None:
        name = _entry_name(path, rel_root)
        try:
            info = tar.gettarinfo(path, arcname=name)
        except OSError as exc:
            # Gone or unreadable before its header was written.
            record_failure(path, exc)
            return
        _add_directory(tar, info, path, report)

    with tarfile.open(archive, "w:gz", format=tarfile.PAX_FORMAT) as tar:
        if rel_root.resolve() != source.resolve():
            # The root itself has a name when entries are relative to an ancestor.
            add_directory(str(source))

        for dir_entry in walk_tree(source, on_error=on_walk_error):
            path = dir_entry.path
            try:
                st = os.lstat(path)
            except OSError as exc:
                record_failure(path, exc)
                continue

            if stat.S_ISDIR(st.st_mode):
                add_directory(path)
            elif stat.S_ISREG(st.st_mode):
                if Path(path).resolve() == archive_abs:
                    continue
                try:
                    fh = open(path, "rb")
                except OSError as exc:
                    record_failure(path, exc)
                    continue
                with fh:
                    _add_file(tar, path, _entry_name(path, rel_root), fh, report)
            else:
                logger.debug("Skipping non-regular file %s", path)
                report.entries.append(
                    EntryOutcome(
                        source_path=Path(path), status="skipped",
                        error="unsupported file type",
                    )
                )

    logger.info(
        "Created archive %s: %d entries, %d failures",
        archive, len(report.entries), len(report.failures),
    )
    return report


def _add_directory(
    tar: tarfile.TarFile, info: tarfile.TarInfo, path: str, report: ArchiveReport,
) -> None:
    tar.addfile(info)
    report.entries.append(
        EntryOutcome(
            source_path=Path(path),
            entry=ArchiveEntry(path=info.name, kind="directory", mode=info.mode),
            status="archived",
        )
    )


def _add_file(
    tar: tarfile.TarFile, path: str, name: str, fh: BinaryIO,
    report: ArchiveReport,
) -> None:
    info = tar.gettarinfo(arcname=name, fileobj=fh)
    try:
        tar.addfile(info, fh)
    except (OSError, tarfile.TarError) as exc:
        # Header already written: the stream cannot be repaired.
        raise ArchiveError(f"Failed writing content of {path}: {exc}") from exc
    report.entries.append(
        EntryOutcome(
            source_path=Path(path),
            entry=ArchiveEntry(path=name, kind="file", size=info.size, mode=info.mode),
            status="archived",
        )
    )


def purge_archived_sources(
    report: ArchiveReport, reporter: Reporter | None = None,
) -> list[Path]:
    """Delete the regular files recorded as archived in ``report``.

    Returns the paths actually removed. Removal failures are reported and
    skipped.
    """
    log = reporter or logger
    removed: list[Path] = []
    for path in report.archived_files:
        try:
            path.unlink()
        except OSError as exc:
            log.error("Failed to remove archived source %s: %s", path, exc)
            continue
        removed.append(path)
    log.info("Removed %d archived source files from %s", len(removed), report.source_root)
    return removed


def create_archive(
    archive_path: str | os.PathLike[str],
    source_root: str | os.PathLike[str],
    relative_root: str | os.PathLike[str] | None = None,
    *,
    purge: bool = True,
    fail_fast: bool = False,
) -> ArchiveReport:
    """Archive ``source_root`` into ``archive_path`` and, by default, delete
    the archived regular files.
    """
    report = build_archive(
        archive_path, source_root, relative_root, fail_fast=fail_fast,
    )
    if purge:
        purge_archived_sources(report)
    return report
