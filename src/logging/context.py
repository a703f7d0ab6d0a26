# src/logging/context.py — v2
"""Contextual logging support — attach run_id, file_path, stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per batch run and per file.
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    file_path: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        file_path=_file_path.get(),
        stage=_stage.get(),
    )


def set_run_context(run_id: str) -> None:
    """Set run-level context (called once per batch run)."""
    _run_id.set(run_id)
    _file_path.set(None)
    _stage.set(None)


def set_file_context(file_path: str | None, stage: str | None = None) -> None:
    """Set file-level context (called per file)."""
    _file_path.set(file_path)
    _stage.set(stage)


def set_stage(stage: str | None) -> None:
    """Set the pipeline stage (prepare, classify, parse)."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _file_path.set(None)
    _stage.set(None)
