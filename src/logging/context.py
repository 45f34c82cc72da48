# src/logging/context.py
"""Contextual logging support: attach run_id, operation, target to records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set per batch run and per processed item.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_target: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "target", default=None
)


@dataclass
class LogContext:
    """Snapshot of the current logging context."""

    run_id: str | None = None
    operation: str | None = None
    target: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    return LogContext(
        run_id=_run_id.get(),
        operation=_operation.get(),
        target=_target.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per batch run)."""
    _run_id.set(run_id)


def set_operation_context(operation: str, target: str | None = None) -> None:
    """Set item-level context (called per processed file)."""
    _operation.set(operation)
    _target.set(target)


def clear_operation_context() -> None:
    _operation.set(None)
    _target.set(None)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    clear_operation_context()
