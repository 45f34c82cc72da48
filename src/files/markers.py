# src/files/markers.py
"""Marker files: touch, and day/month rollover detection."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import NamedTuple


class DayMonthChange(NamedTuple):
    day_changed: bool
    month_changed: bool


def touch(path: str | os.PathLike[str]) -> None:
    """Delete ``path`` if it exists and recreate it empty."""
    p = Path(path)
    p.unlink(missing_ok=True)
    p.touch()


def _parse_timestamp(text: str) -> datetime:
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def should_run_day_month(
    marker_file: str | os.PathLike[str], now: datetime | None = None,
) -> DayMonthChange:
    """Compare the timestamp in ``marker_file`` with ``now`` and update it.

    The marker holds an ISO-8601 timestamp with offset. When it does not
    exist it is created with ``now`` and nothing counts as changed.

    Raises:
        ValueError: The marker content is not a timestamp.
        OSError: The marker cannot be read or written.
    """
    current = now or datetime.now()
    if current.tzinfo is None:
        current = current.astimezone()
    marker = Path(marker_file)
    stamp = current.isoformat(timespec="seconds")

    if not marker.exists():
        marker.write_text(stamp, encoding="utf-8")
        return DayMonthChange(False, False)

    last = _parse_timestamp(marker.read_text(encoding="utf-8"))
    if last.tzinfo is None:
        last = last.astimezone()
    last = last.astimezone(current.tzinfo)

    change = DayMonthChange(
        day_changed=last.date() != current.date(),
        month_changed=(last.year, last.month) != (current.year, current.month),
    )
    marker.write_text(stamp, encoding="utf-8")
    return change
