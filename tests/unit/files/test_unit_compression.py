# tests/unit/files/test_unit_compression.py
"""Tests for files/compression.py."""

from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from opshelpers.files.compression import gunzip_file, gzip_file


def test_gzip_produces_gzip_stream(tmp_path: Path):
    src = tmp_path / "data.txt"
    src.write_bytes(b"hello world\n" * 100)
    dst = tmp_path / "data.txt.gz"
    gzip_file(src, dst)
    assert dst.read_bytes()[:2] == b"\x1f\x8b"
    assert gzip.decompress(dst.read_bytes()) == src.read_bytes()


def test_gunzip_restores_content(tmp_path: Path):
    gz = tmp_path / "in.gz"
    gz.write_bytes(gzip.compress(b"payload"))
    out = tmp_path / "out.bin"
    out.write_bytes(b"previous content that is longer")
    gunzip_file(gz, out)
    assert out.read_bytes() == b"payload"


def test_gunzip_rejects_plain_file(tmp_path: Path):
    src = tmp_path / "plain.txt"
    src.write_bytes(b"not compressed")
    with pytest.raises(gzip.BadGzipFile):
        gunzip_file(src, tmp_path / "out")


def test_missing_source(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        gzip_file(tmp_path / "missing", tmp_path / "out.gz")
