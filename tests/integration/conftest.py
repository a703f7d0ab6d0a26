# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

Integration tests wire real modules together (Pillow preparation, JSON
store, CSV export, logging handlers). Only the vision model is replaced,
by MockLLMClient below. No network or Docker required.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from mediatagger.llm.base_client import BaseLLMClient
from mediatagger.llm.models import ImageInput, LLMResponse, Message


# =====================================================================
#  MOCK LLM CLIENT
# =====================================================================

class MockLLMClient(BaseLLMClient):
    """Mock vision client for integration testing without real LLM services.

    Responses are queued per call; exceptions in the queue are raised.
    """

    def __init__(self, default_response: str = "Title: Mock\nDescription: Mock\nKeywords: mock"):
        self._default_response = default_response
        self._response_queue: list[str | Exception] = []
        self.calls: list[dict[str, Any]] = []

    def set_responses(self, *responses: str | Exception) -> None:
        self._response_queue = list(responses)

    def set_default(self, response: str) -> None:
        self._default_response = response

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        self.calls.append({"messages": messages, "images": images, "system": system})
        content = self._response_queue.pop(0) if self._response_queue else self._default_response
        if isinstance(content, Exception):
            raise content
        return LLMResponse(
            content=content, input_tokens=100, output_tokens=len(content) // 4,
            model="mock-model", provider="mock", latency_ms=15,
            raw_response={"mock": True},
        )

    @property
    def supports_vision(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "mock-model"


@pytest.fixture
def mock_llm() -> MockLLMClient:
    return MockLLMClient()


# =====================================================================
#  MEDIA FOLDER
# =====================================================================

@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """A folder of real images in several formats, plus noise."""
    root = tmp_path / "media"
    (root / "sub").mkdir(parents=True)
    Image.new("RGB", (1600, 1200), (180, 20, 20)).save(root / "a_car.jpg", format="JPEG")
    Image.new("RGBA", (400, 800), (0, 120, 255, 128)).save(root / "b_logo.png", format="PNG")
    Image.new("RGB", (640, 640), (20, 160, 20)).save(root / "sub" / "c_field.webp", format="WEBP")
    (root / "d_broken.jpg").write_bytes(b"this is not a jpeg")
    (root / "notes.txt").write_text("ignore me")
    return root
