# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides processing settings, in-memory fake collaborators for the batch
processor, mock LLM clients and small on-disk images.
No network access; all provider calls are mocked.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from mediatagger.batch.models import ProcessingSettings
from mediatagger.llm.models import LLMResponse
from mediatagger.preparation.base_preparer import PreparedImage

RED_CAR_RESPONSE = (
    "Title: Red Car\n"
    "Description: A red car on a street\n"
    "Keywords: car, red, street"
)


# === FIXTURES: Settings ===


@pytest.fixture
def processing_settings() -> ProcessingSettings:
    """Settings matching the reference two-file scenario."""
    return ProcessingSettings(
        provider="openai",
        model="gpt-4o-mini",
        api_key="sk-test",
        title_limit=150,
        description_limit=150,
        keyword_limit=25,
        request_interval=0,
    )


# === FIXTURES: Fake collaborators ===


class FakePreparer:
    """Returns a tiny JPEG payload; records every call in order."""

    def __init__(self, failures: dict[str, Exception] | None = None, size: int = 16):
        self.failures = failures or {}
        self.size = size
        self.calls: list[str] = []

    async def prepare(self, file_path: str) -> PreparedImage:
        self.calls.append(file_path)
        if file_path in self.failures:
            raise self.failures[file_path]
        return PreparedImage(source_path=file_path, data=b"\xff" * self.size)


class FakeClassifier:
    """Answers per file path; exceptions in ``responses`` are raised."""

    def __init__(self, responses: dict[str, str | Exception] | None = None,
                 default: str = RED_CAR_RESPONSE):
        self.responses = responses or {}
        self.default = default
        self.calls: list[str] = []

    async def classify(self, image: PreparedImage, settings: ProcessingSettings) -> str:
        self.calls.append(image.source_path)
        answer = self.responses.get(image.source_path, self.default)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_preparer() -> FakePreparer:
    return FakePreparer()


@pytest.fixture
def fake_classifier() -> FakeClassifier:
    return FakeClassifier()


# === FIXTURES: Mock LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content=RED_CAR_RESPONSE,
        input_tokens=300,
        output_tokens=40,
        model="gpt-4o-mini",
        provider="openai",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete_with_vision = AsyncMock(return_value=mock_llm_response)
    client.supports_vision = True
    client.provider_name = "openai"
    client.model_name = "gpt-4o-mini"
    return client


# === FIXTURES: Files ===


@pytest.fixture
def sample_image(tmp_path: Path) -> Path:
    """A 1024x512 RGB JPEG on disk."""
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (1024, 512), (200, 30, 30)).save(path, format="JPEG")
    return path


@pytest.fixture
def sample_png_with_alpha(tmp_path: Path) -> Path:
    """A 300x600 RGBA PNG on disk."""
    path = tmp_path / "logo.png"
    Image.new("RGBA", (300, 600), (0, 0, 255, 0)).save(path, format="PNG")
    return path


@pytest.fixture
def make_preparer():
    """Factory for FakePreparer with custom failures."""
    return FakePreparer


@pytest.fixture
def make_classifier():
    """Factory for FakeClassifier with per-file responses."""
    return FakeClassifier
