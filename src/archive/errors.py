# src/archive/errors.py
"""Archive exception hierarchy.

Filesystem failures are not wrapped: they surface as the original OSError.
"""

from __future__ import annotations


class ArchiveError(Exception):
    """Base class for archive creation and extraction failures."""


class ArchiveFormatError(ArchiveError):
    """The compressed stream is not a readable gzip-compressed tar."""


class UnsafeArchivePathError(ArchiveFormatError):
    """An entry path is absolute or escapes the extraction directory."""
