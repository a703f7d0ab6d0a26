# src/batch/models.py — v2
"""Batch processing models: ProcessingSettings, ProcessingResult, BatchProcessingStatus."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mediatagger.core.models import FileMetadata


class ProcessingSettings(BaseModel):
    """Immutable configuration for one batch run."""

    model_config = ConfigDict(frozen=True)

    # Classifier selection
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: str = Field(default="", repr=False)
    base_url: str | None = None

    # Per-field limits
    title_limit: int = Field(default=150, gt=0)
    description_limit: int = Field(default=150, gt=0)
    keyword_limit: int = Field(default=25, gt=0)

    # Locale preference
    include_place_name: bool = False

    # Pause between two consecutive files, in seconds
    request_interval: float = Field(default=0.0, ge=0)


class ProcessingResult(BaseModel):
    """Outcome for one file. Exactly one of metadata / error is set."""

    file_path: str
    success: bool
    metadata: FileMetadata | None = None
    error: str | None = None

    @model_validator(mode="after")
    def validate_outcome(self) -> ProcessingResult:
        if self.success and (self.metadata is None or self.error is not None):
            raise ValueError("successful result requires metadata and no error")
        if not self.success and (self.error is None or self.metadata is not None):
            raise ValueError("failed result requires an error and no metadata")
        return self

    @classmethod
    def succeeded(cls, file_path: str, metadata: FileMetadata) -> ProcessingResult:
        return cls(file_path=file_path, success=True, metadata=metadata)

    @classmethod
    def failed(cls, file_path: str, error: str) -> ProcessingResult:
        return cls(file_path=file_path, success=False, error=error or "Unknown error")


class BatchProcessingStatus(BaseModel):
    """Run-level counters. Owned by BatchProcessor; observers get copies."""

    total: int = 0
    completed: int = 0
    failed: int = 0
    in_progress: bool = False

    @property
    def processed(self) -> int:
        return self.completed + self.failed

    @property
    def remaining(self) -> int:
        return max(self.total - self.processed, 0)

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0 if not self.in_progress else 0.0
        return round(100.0 * self.processed / self.total, 1)
