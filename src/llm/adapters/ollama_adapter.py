# src/llm/adapters/ollama_adapter.py — v2
"""Ollama local LLM adapter implementing BaseLLMClient.

Uses the ollama Python SDK. Vision support is model-dependent.
"""

from __future__ import annotations

import time
from typing import Any

from mediatagger.llm.base_client import BaseLLMClient
from mediatagger.llm.models import ImageInput, LLMResponse, Message

# Model families known to accept images
_VISION_MODELS = {"llava", "bakllava", "llava-llama3", "moondream", "llama3.2-vision", "gemma3"}


class OllamaAdapter(BaseLLMClient):
    """Ollama local inference adapter."""

    def __init__(
        self, model: str = "llava", host: str = "http://localhost:11434", **kwargs: Any,
    ):
        self._model = model
        self._host = host

    async def complete_with_vision(
        self,
        messages: list[Message],
        images: list[ImageInput],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        import ollama

        client = ollama.AsyncClient(host=self._host)
        msgs: list[dict[str, Any]] = []
        if system:
            msgs.append({"role": "system", "content": system})

        # Combine text + images into single user message
        text = " ".join(m.content for m in messages)
        msgs.append({"role": "user", "content": text, "images": [img.b64() for img in images]})

        t0 = time.monotonic()
        resp = await client.chat(
            model=self._model,
            messages=msgs,
            options={"num_predict": max_tokens, "temperature": temperature},
        )
        latency = int((time.monotonic() - t0) * 1000)

        return LLMResponse(
            content=resp["message"]["content"] or "",
            input_tokens=resp.get("prompt_eval_count", 0) or 0,
            output_tokens=resp.get("eval_count", 0) or 0,
            model=self._model,
            provider="ollama",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def supports_vision(self) -> bool:
        return any(v in self._model.lower() for v in _VISION_MODELS)

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model
