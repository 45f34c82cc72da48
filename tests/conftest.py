# tests/conftest.py
"""Shared test fixtures for unit and integration tests.

Everything runs against tmp_path; no external services.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from opshelpers.logging.context import clear_context
from support import SAMPLE_TREE, TreeSpec, write_tree


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """A small source tree with nested directories and an empty directory."""
    return write_tree(tmp_path / "source", SAMPLE_TREE)


@pytest.fixture
def tree_factory(tmp_path: Path) -> Callable[[str, TreeSpec], Path]:
    def _make(name: str, layout: TreeSpec) -> Path:
        return write_tree(tmp_path / name, layout)
    return _make


@pytest.fixture
def reporter() -> MagicMock:
    """Mock Reporter recording info/warning/error calls."""
    return MagicMock(spec=["info", "warning", "error"])


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
