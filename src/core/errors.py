# src/core/errors.py — v2
"""Domain error taxonomy.

Per-file errors (preparation, classification) are recovered by the batch
processor into failed results; they never abort a run.
"""

from __future__ import annotations


class MediaTaggerError(Exception):
    """Base class for all mediatagger errors."""


class PreparationError(MediaTaggerError):
    """Source file missing, unreadable, unsupported, or too large once encoded."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(reason)


class ClassificationError(MediaTaggerError):
    """Classifier misconfigured, unreachable, or returned no usable content."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class EmbedError(MediaTaggerError):
    """Metadata could not be written into a media file or its sidecar."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"{file_path}: {reason}")
