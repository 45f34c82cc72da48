# src/text/conversions.py
"""Lenient string conversions."""

from __future__ import annotations

import re

_INT_RE = re.compile(r"[+-]?[0-9]+")


def str_to_int(value: str, default: int = 0) -> int:
    """Parse a plain decimal integer, returning ``default`` for anything else.

    Only an optional sign followed by ASCII digits is accepted; whitespace,
    underscores and decimals all yield ``default``.
    """
    if not _INT_RE.fullmatch(value):
        return default
    return int(value)
