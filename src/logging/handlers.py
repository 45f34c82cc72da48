# src/logging/handlers.py
"""File rotation handler for log files.

Rotation is size based. Backups beyond ``retention`` are dropped by the
stdlib handler; backups older than ``max_age_days`` are pruned on rollover.
"""

from __future__ import annotations

import re
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

SECONDS_PER_DAY = 86400


def parse_size(size_str: str) -> int:
    """Parse size string like '10MB' into bytes.

    Supported suffixes: KB, MB, GB (case-insensitive).
    """
    match = re.match(r"^(\d+)\s*(KB|MB|GB)$", size_str.strip(), re.IGNORECASE)
    if not match:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    value = int(match.group(1))
    unit = match.group(2).upper()
    multipliers = {"KB": 1024, "MB": 1024**2, "GB": 1024**3}
    return value * multipliers[unit]


class AgeLimitedRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that also deletes backups older than a cutoff."""

    def __init__(
        self,
        filename: str,
        maxBytes: int = 0,
        backupCount: int = 0,
        max_age_days: int = 0,
        encoding: str | None = None,
    ) -> None:
        super().__init__(
            filename, maxBytes=maxBytes, backupCount=backupCount, encoding=encoding,
        )
        self.max_age_days = max_age_days

    def backups(self) -> list[Path]:
        """Existing numbered backups (``app.log.1``, ``app.log.2``, ...)."""
        base = Path(self.baseFilename)
        found = []
        for candidate in base.parent.glob(f"{base.name}.*"):
            if candidate.name[len(base.name) + 1:].isdigit():
                found.append(candidate)
        return sorted(found)

    def prune_backups(self, now: float | None = None) -> list[Path]:
        """Delete backups last modified more than ``max_age_days`` ago.

        A ``max_age_days`` of 0 disables pruning. Returns the removed paths.
        """
        if self.max_age_days <= 0:
            return []
        cutoff = (now if now is not None else time.time()) - self.max_age_days * SECONDS_PER_DAY
        removed = []
        for backup in self.backups():
            if backup.stat().st_mtime < cutoff:
                backup.unlink(missing_ok=True)
                removed.append(backup)
        return removed

    def doRollover(self) -> None:
        super().doRollover()
        self.prune_backups()


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 6,
    max_age_days: int = 30,
) -> AgeLimitedRotatingFileHandler:
    """Create a size-based rotating file handler.

    Args:
        log_file: Path to log file; parent directories are created.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated backups to keep.
        max_age_days: Drop backups older than this many days (0 keeps all).
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    return AgeLimitedRotatingFileHandler(
        filename=str(path),
        maxBytes=parse_size(rotation),
        backupCount=retention,
        max_age_days=max_age_days,
        encoding="utf-8",
    )
