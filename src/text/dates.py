# src/text/dates.py
"""Pull YYYYMMDD dates out of file names and similar strings."""

from __future__ import annotations

import re

# 20xx only. Either compact YYYYMMDD or YYYY?MM?DD with one of "._-" as
# separator (mixing separators is accepted).
_DATE_RE = re.compile(
    r"(20\d{2}(0[1-9]|1[0-2])(0[1-9]|[12]\d|3[01]))"
    r"|(20\d{2}[._-](0[1-9]|1[0-2])[._-](0[1-9]|[12]\d|3[01]))"
)
_SEPARATORS = str.maketrans("", "", "._-")


class DateNotFoundError(ValueError):
    """No recognizable date in the input string."""


def extract_date(text: str) -> str:
    """Return the first date in ``text`` normalized to ``YYYYMMDD``.

    >>> extract_date("export_2023-06-30_08.log")
    '20230630'

    Raises:
        DateNotFoundError: If no date is found.
    """
    match = _DATE_RE.search(text)
    if match is None:
        raise DateNotFoundError(f"no date found in {text!r}")
    return match.group(0).translate(_SEPARATORS)


def split_date(date: str) -> tuple[str, str, str]:
    """Split ``YYYYMMDD`` into ``(year, month, day)`` strings.

    Only the length is checked.
    """
    if len(date) != 8:
        raise ValueError(f"date should be in format YYYYMMDD, got {date!r}")
    return date[0:4], date[4:6], date[6:8]
