# src/archive/models.py
"""Archive models: ArchiveEntry, ArchiveReport, BatchEntry, BatchResult."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

EntryKind = Literal["file", "directory"]


class ArchiveEntry(BaseModel):
    """One tar record as written to or read from an archive."""

    path: str
    kind: EntryKind
    size: int = 0
    mode: int = 0o644

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if not v or v.startswith("/"):
            raise ValueError(f"entry path must be relative, got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_directory_size(self) -> ArchiveEntry:
        if self.kind == "directory" and self.size != 0:
            raise ValueError("directory entries carry no content")
        return self


class EntryOutcome(BaseModel):
    """What happened to one filesystem object while building an archive."""

    source_path: Path
    entry: ArchiveEntry | None = None
    status: Literal["archived", "skipped", "failed"]
    error: str | None = None


class ArchiveReport(BaseModel):
    """Per-entry outcomes of a single archive build."""

    archive_path: Path
    source_root: Path
    relative_root: Path
    entries: list[EntryOutcome] = Field(default_factory=list)

    @property
    def archived_files(self) -> list[Path]:
        """Source paths of regular files whose content made it into the archive."""
        return [
            o.source_path
            for o in self.entries
            if o.status == "archived" and o.entry is not None and o.entry.kind == "file"
        ]

    @property
    def failures(self) -> list[EntryOutcome]:
        return [o for o in self.entries if o.status == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failures


class BatchEntry(BaseModel):
    """Outcome for one candidate archive found by the batch driver."""

    source_path: Path
    outcome: Literal["success", "open_failed", "extract_failed", "remove_failed"]
    error: str | None = None
    entries_extracted: int = 0


class BatchResult(BaseModel):
    """Summary of one directory scan + extraction run."""

    run_id: str
    source_dir: Path
    dest_dir: Path
    recursive: bool
    entries: list[BatchEntry] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def total_found(self) -> int:
        return len(self.entries)

    @property
    def succeeded(self) -> int:
        return sum(1 for e in self.entries if e.outcome == "success")

    @property
    def failed(self) -> int:
        return self.total_found - self.succeeded
