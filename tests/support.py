# tests/support.py
"""Helpers shared by test modules: tree builders and hand-made archives."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path

# Relative path -> content; None marks a directory.
TreeSpec = dict[str, "bytes | None"]

SAMPLE_TREE: TreeSpec = {
    "a.txt": b"alpha",
    "logs": None,
    "logs/app.log": b"line 1\nline 2\n",
    "logs/nested": None,
    "logs/nested/deep.bin": bytes(range(256)) * 8,
    "empty": None,
}


def write_tree(root: Path, layout: TreeSpec) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in layout.items():
        p = root / rel
        if content is None:
            p.mkdir(parents=True, exist_ok=True)
        else:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(content)
    return root


def snapshot_tree(root: Path) -> dict[str, bytes | None]:
    """Relative POSIX path -> content (None for directories)."""
    snap: dict[str, bytes | None] = {}
    for p in sorted(root.rglob("*")):
        rel = p.relative_to(root).as_posix()
        snap[rel] = None if p.is_dir() else p.read_bytes()
    return snap


def regular_files(root: Path) -> list[Path]:
    return [p for p in root.rglob("*") if p.is_file()]


def make_targz(members: list[tuple[str, bytes | None, int]]) -> bytes:
    """Build tar.gz bytes from ``(name, content_or_None_for_dir, mode)``."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content, mode in members:
            info = tarfile.TarInfo(name)
            info.mode = mode
            if content is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()
