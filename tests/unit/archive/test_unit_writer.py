# tests/unit/archive/test_unit_writer.py
"""Tests for archive.writer: build, purge, create."""

from __future__ import annotations

import os
import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from opshelpers.archive.errors import ArchiveError
from opshelpers.archive.writer import (
    build_archive,
    create_archive,
    purge_archived_sources,
)
from support import regular_files


def _names(archive: Path) -> list[str]:
    with tarfile.open(archive, "r:gz") as tar:
        return tar.getnames()


# ---------------------------------------------------------------------------
# build_archive()
# ---------------------------------------------------------------------------

class TestBuildArchive:
    def test_entries_relative_to_source_root(self, sample_tree: Path, tmp_path: Path):
        archive = tmp_path / "out.tar.gz"
        build_archive(archive, sample_tree)
        assert _names(archive) == [
            "a.txt",
            "empty",
            "logs",
            "logs/app.log",
            "logs/nested",
            "logs/nested/deep.bin",
        ]

    def test_directory_precedes_its_contents(self, sample_tree: Path, tmp_path: Path):
        archive = tmp_path / "out.tar.gz"
        build_archive(archive, sample_tree)
        names = _names(archive)
        assert names.index("logs") < names.index("logs/app.log")
        assert names.index("logs/nested") < names.index("logs/nested/deep.bin")

    def test_entry_kinds_and_sizes(self, sample_tree: Path, tmp_path: Path):
        archive = tmp_path / "out.tar.gz"
        build_archive(archive, sample_tree)
        with tarfile.open(archive, "r:gz") as tar:
            members = {m.name: m for m in tar.getmembers()}
        assert members["logs"].isdir()
        assert members["a.txt"].isreg()
        assert members["a.txt"].size == 5
        assert members["logs/nested/deep.bin"].size == 2048

    def test_does_not_touch_sources(self, sample_tree: Path, tmp_path: Path):
        before = len(regular_files(sample_tree))
        build_archive(tmp_path / "out.tar.gz", sample_tree)
        assert len(regular_files(sample_tree)) == before

    def test_alternate_relative_root(self, sample_tree: Path, tmp_path: Path):
        archive = tmp_path / "out.tar.gz"
        build_archive(archive, sample_tree / "logs", relative_root=sample_tree)
        names = _names(archive)
        assert names[0] == "logs"
        assert "logs/app.log" in names
        assert "a.txt" not in names

    def test_empty_relative_root_means_source_root(self, sample_tree: Path, tmp_path: Path):
        archive = tmp_path / "out.tar.gz"
        build_archive(archive, sample_tree, relative_root="")
        assert "a.txt" in _names(archive)

    def test_relative_root_must_be_ancestor(self, sample_tree: Path, tmp_path: Path):
        other = tmp_path / "elsewhere"
        other.mkdir()
        with pytest.raises(ArchiveError, match="not an ancestor"):
            build_archive(tmp_path / "out.tar.gz", sample_tree, relative_root=other)

    def test_missing_source_root(self, tmp_path: Path):
        with pytest.raises(ArchiveError, match="not a directory"):
            build_archive(tmp_path / "out.tar.gz", tmp_path / "missing")

    def test_missing_archive_parent(self, sample_tree: Path, tmp_path: Path):
        with pytest.raises(OSError):
            build_archive(tmp_path / "no" / "such" / "out.tar.gz", sample_tree)

    def test_archive_inside_source_is_not_archived(self, sample_tree: Path):
        archive = sample_tree / "self.tar.gz"
        build_archive(archive, sample_tree)
        assert "self.tar.gz" not in _names(archive)

    def test_permission_bits_recorded(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        f = src / "script.sh"
        f.write_bytes(b"#!/bin/sh\n")
        os.chmod(f, 0o750)
        report = build_archive(tmp_path / "out.tar.gz", src)
        assert report.entries[0].entry is not None
        assert report.entries[0].entry.mode == 0o750

    def test_symlink_skipped(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "real.txt").write_bytes(b"x")
        (src / "link.txt").symlink_to(src / "real.txt")
        report = build_archive(tmp_path / "out.tar.gz", src)
        statuses = {o.source_path.name: o.status for o in report.entries}
        assert statuses == {"link.txt": "skipped", "real.txt": "archived"}
        assert _names(tmp_path / "out.tar.gz") == ["real.txt"]


class TestBuildArchiveFailures:
    def _failing_open(self, bad_name: str):
        real_open = open

        def fake_open(path, *args, **kwargs):
            if os.fspath(path).endswith(bad_name):
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_open(path, *args, **kwargs)

        return fake_open

    def test_unreadable_file_recorded_and_walk_continues(
        self, sample_tree: Path, tmp_path: Path,
    ):
        archive = tmp_path / "out.tar.gz"
        with patch("builtins.open", self._failing_open("app.log")):
            report = build_archive(archive, sample_tree)

        assert not report.ok
        assert [f.source_path.name for f in report.failures] == ["app.log"]
        assert "Permission denied" in (report.failures[0].error or "")
        names = _names(archive)
        assert "logs/app.log" not in names
        assert "logs/nested/deep.bin" in names

    def test_fail_fast_raises(self, sample_tree: Path, tmp_path: Path):
        with patch("builtins.open", self._failing_open("app.log")):
            with pytest.raises(ArchiveError, match="app.log"):
                build_archive(tmp_path / "out.tar.gz", sample_tree, fail_fast=True)

    def _vanishing_directory(self, bad_name: str):
        real_gettarinfo = tarfile.TarFile.gettarinfo

        def fake_gettarinfo(tar, name=None, arcname=None, fileobj=None):
            if name is not None and os.fspath(name).endswith(bad_name):
                raise FileNotFoundError(2, "No such file or directory", os.fspath(name))
            return real_gettarinfo(tar, name, arcname, fileobj)

        return fake_gettarinfo

    def test_vanished_directory_recorded_and_walk_continues(
        self, sample_tree: Path, tmp_path: Path,
    ):
        archive = tmp_path / "out.tar.gz"
        with patch.object(
            tarfile.TarFile, "gettarinfo", self._vanishing_directory("nested"),
        ):
            report = build_archive(archive, sample_tree)

        assert [f.source_path.name for f in report.failures] == ["nested"]
        assert "No such file" in (report.failures[0].error or "")
        names = _names(archive)
        assert "logs/nested" not in names
        assert "a.txt" in names
        assert "logs/app.log" in names

    def test_vanished_directory_with_fail_fast_raises(
        self, sample_tree: Path, tmp_path: Path,
    ):
        with patch.object(
            tarfile.TarFile, "gettarinfo", self._vanishing_directory("nested"),
        ):
            with pytest.raises(ArchiveError, match="nested"):
                build_archive(tmp_path / "out.tar.gz", sample_tree, fail_fast=True)

    def test_vanished_source_root_under_ancestor(self, sample_tree: Path, tmp_path: Path):
        with patch.object(
            tarfile.TarFile, "gettarinfo", self._vanishing_directory("logs"),
        ):
            report = build_archive(
                tmp_path / "out.tar.gz", sample_tree / "logs", relative_root=sample_tree,
            )
        assert [f.source_path.name for f in report.failures] == ["logs"]
        assert "logs/app.log" in _names(tmp_path / "out.tar.gz")


# ---------------------------------------------------------------------------
# purge / create
# ---------------------------------------------------------------------------

class TestPurgeAndCreate:
    def test_purge_removes_only_archived_files(self, sample_tree: Path, tmp_path: Path, reporter):
        report = build_archive(tmp_path / "out.tar.gz", sample_tree)
        removed = purge_archived_sources(report, reporter=reporter)
        assert len(removed) == 3
        assert regular_files(sample_tree) == []
        assert (sample_tree / "logs" / "nested").is_dir()
        assert (sample_tree / "empty").is_dir()

    def test_purge_reports_removal_failure(self, sample_tree: Path, tmp_path: Path, reporter):
        report = build_archive(tmp_path / "out.tar.gz", sample_tree)
        (sample_tree / "a.txt").unlink()
        removed = purge_archived_sources(report, reporter=reporter)
        assert len(removed) == 2
        reporter.error.assert_called_once()

    def test_purge_skips_failed_entries(self, sample_tree: Path, tmp_path: Path):
        real_open = open

        def fake_open(path, *args, **kwargs):
            if os.fspath(path).endswith("a.txt"):
                raise PermissionError(13, "Permission denied")
            return real_open(path, *args, **kwargs)

        with patch("builtins.open", fake_open):
            report = build_archive(tmp_path / "out.tar.gz", sample_tree)
        purge_archived_sources(report)
        assert (sample_tree / "a.txt").exists()

    def test_create_archive_consumes_flat_tree(self, tree_factory, tmp_path: Path):
        src = tree_factory("flat", {"one.csv": b"1", "two.csv": b"2", "three.csv": b"3"})
        report = create_archive(tmp_path / "flat.tar.gz", src)
        assert len(report.archived_files) == 3
        assert regular_files(src) == []
        assert src.is_dir()

    def test_create_archive_keep_sources(self, sample_tree: Path, tmp_path: Path):
        create_archive(tmp_path / "out.tar.gz", sample_tree, purge=False)
        assert len(regular_files(sample_tree)) == 3
