# src/files/compression.py
"""Single-file gzip compression and decompression."""

from __future__ import annotations

import gzip
import os
import shutil


def gzip_file(source: str | os.PathLike[str], destination: str | os.PathLike[str]) -> None:
    """Compress ``source`` into the gzip file ``destination`` (overwritten)."""
    with open(source, "rb") as src, gzip.open(destination, "wb") as dst:
        shutil.copyfileobj(src, dst)


def gunzip_file(source: str | os.PathLike[str], destination: str | os.PathLike[str]) -> None:
    """Decompress the gzip file ``source`` into ``destination``.

    Raises:
        gzip.BadGzipFile: ``source`` is not gzip data.
    """
    with gzip.open(source, "rb") as src, open(destination, "wb") as dst:
        shutil.copyfileobj(src, dst)
