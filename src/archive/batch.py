# src/archive/batch.py
"""Batch driver: find *.tar.gz archives in a directory and extract each one.

Every candidate is handled in isolation. A failure to open, extract or
remove one archive is reported and the scan moves on; the driver itself
never raises for a bad candidate.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Any, Protocol

from opshelpers.archive.errors import ArchiveError
from opshelpers.archive.models import BatchEntry, BatchResult
from opshelpers.archive.reader import extract_archive
from opshelpers.files.listing import walk_tree
from opshelpers.logging.context import (
    clear_operation_context,
    set_operation_context,
    set_run_context,
)

logger = logging.getLogger(__name__)

# Literal, case-sensitive suffix: "data.TAR.GZ" and "data.tgz" are ignored.
ARCHIVE_SUFFIX = ".tar.gz"


class Reporter(Protocol):
    """Leveled message sink. Any ``logging.Logger`` qualifies."""

    def info(self, msg: str, *args: Any) -> Any: ...

    def warning(self, msg: str, *args: Any) -> Any: ...

    def error(self, msg: str, *args: Any) -> Any: ...


def is_archive_name(name: str) -> bool:
    return name.endswith(ARCHIVE_SUFFIX)


class ArchiveBatchProcessor:
    """Scan a directory for archives and extract them one by one.

    Workflow:
        1. List candidate files (flat or recursive) before touching anything
        2. For each candidate: open, extract into the destination, report
        3. Remove the source archive only after a successful extraction
        4. Return a BatchResult with one BatchEntry per candidate
    """

    def __init__(self, reporter: Reporter | None = None) -> None:
        self._reporter: Reporter = reporter or logger

    def scan(
        self, source_dir: str | os.PathLike[str], recursive: bool = False,
    ) -> list[Path]:
        """Return candidate archives in discovery order.

        Unreadable directories are reported and skipped.
        """
        def on_error(exc: OSError) -> None:
            self._reporter.error("Failed to walk path %s: %s", exc.filename, exc)

        if recursive:
            entries = walk_tree(source_dir, on_error=on_error)
        else:
            entries = self._list_flat(source_dir, on_error)

        candidates = [
            Path(e.path)
            for e in entries
            if is_archive_name(e.name) and e.is_file(follow_symlinks=False)
        ]
        logger.debug(
            "Scanned %s: %d archives (recursive=%s)",
            source_dir, len(candidates), recursive,
        )
        return candidates

    @staticmethod
    def _list_flat(source_dir, on_error) -> list[os.DirEntry[str]]:
        try:
            with os.scandir(source_dir) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as exc:
            on_error(exc)
            return []

    def process(
        self,
        source_dir: str | os.PathLike[str],
        dest_dir: str | os.PathLike[str],
        recursive: bool = False,
    ) -> BatchResult:
        """Extract every archive found under ``source_dir`` into ``dest_dir``."""
        t0 = time.perf_counter()
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)

        result = BatchResult(
            run_id=run_id,
            source_dir=Path(source_dir),
            dest_dir=Path(dest_dir),
            recursive=recursive,
        )
        for path in self.scan(source_dir, recursive):
            set_operation_context("extract", str(path))
            try:
                result.entries.append(self._process_one(path, Path(dest_dir)))
            finally:
                clear_operation_context()

        result.duration_seconds = round(time.perf_counter() - t0, 3)
        self._reporter.info(
            "Processed %d archives from %s: %d extracted, %d failed",
            result.total_found, source_dir, result.succeeded, result.failed,
        )
        return result

    def _process_one(self, path: Path, dest_dir: Path) -> BatchEntry:
        try:
            fh = open(path, "rb")
        except OSError as exc:
            self._reporter.error("Failed to open file %s: %s", path, exc)
            return BatchEntry(source_path=path, outcome="open_failed", error=str(exc))

        self._reporter.info("Extracting file %s", path)
        try:
            with fh:
                extracted = extract_archive(fh, dest_dir)
        except (ArchiveError, OSError) as exc:
            self._reporter.error("Failed to extract file %s: %s", path, exc)
            return BatchEntry(source_path=path, outcome="extract_failed", error=str(exc))
        except Exception as exc:
            # Unexpected reader failures are confined to this candidate.
            self._reporter.error("Failed to extract file %s: %s", path, exc)
            logger.debug("Unexpected extraction failure for %s", path, exc_info=True)
            return BatchEntry(source_path=path, outcome="extract_failed", error=str(exc))
        self._reporter.info("Extracted file %s (%d entries)", path, len(extracted))

        try:
            path.unlink()
        except OSError as exc:
            self._reporter.error("Failed to remove file %s: %s", path, exc)
            return BatchEntry(
                source_path=path, outcome="remove_failed", error=str(exc),
                entries_extracted=len(extracted),
            )
        self._reporter.info("Removed file %s", path)
        return BatchEntry(
            source_path=path, outcome="success", entries_extracted=len(extracted),
        )


def extract_all_in_directory(
    source_dir: str | os.PathLike[str],
    dest_dir: str | os.PathLike[str],
    recursive: bool = False,
    reporter: Reporter | None = None,
) -> BatchResult:
    """Extract all ``*.tar.gz`` files in ``source_dir`` into ``dest_dir``.

    Successfully extracted archives are deleted. Failures are sent to
    ``reporter`` (default: this module's logger) and recorded in the result.
    """
    return ArchiveBatchProcessor(reporter=reporter).process(
        source_dir, dest_dir, recursive=recursive,
    )
