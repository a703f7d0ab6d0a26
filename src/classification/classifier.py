# src/classification/classifier.py — v1
"""Vision classifier: sends a prepared image to an LLM and returns its text.

The response is returned raw; parsing into title/description/keywords is
done by the batch pipeline (classification/parser.py).
"""

from __future__ import annotations

import logging
from typing import Callable

from mediatagger.batch.models import ProcessingSettings
from mediatagger.classification.prompts import SYSTEM_PROMPT, build_metadata_prompt
from mediatagger.core.errors import ClassificationError
from mediatagger.llm.base_client import BaseLLMClient
from mediatagger.llm.client_factory import (
    UnsupportedProviderError,
    create_llm_client,
    normalize_provider,
    requires_api_key,
)
from mediatagger.llm.models import ImageInput, Message
from mediatagger.llm.retry import LLMRetryExhausted, RetryConfig, with_retry
from mediatagger.preparation.base_preparer import PreparedImage

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., BaseLLMClient]


class VisionClassifier:
    """Classifier client over the provider adapters in mediatagger.llm."""

    def __init__(
        self,
        client_factory: ClientFactory = create_llm_client,
        retry_configs: dict[str, RetryConfig] | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> None:
        self._client_factory = client_factory
        self._retry_configs = retry_configs
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._clients: dict[tuple[str, str, str, str | None], BaseLLMClient] = {}

    async def classify(self, image: PreparedImage, settings: ProcessingSettings) -> str:
        """Return the model's free-text answer for ``image``.

        Raises:
            ClassificationError: Misconfiguration, exhausted transport retries,
                or an empty response.
        """
        client = self._get_client(settings)

        messages = [Message(role="user", content=build_metadata_prompt(settings))]
        images = [
            ImageInput(data=image.data, media_type=image.media_type, source_id=image.source_path)
        ]

        try:
            response = await with_retry(
                client.complete_with_vision,
                messages,
                images,
                system=SYSTEM_PROMPT,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                operation=f"{client.provider_name}:{client.model_name}",
                retry_configs=self._retry_configs,
            )
        except LLMRetryExhausted as e:
            raise ClassificationError(
                _describe_transport_error(e), provider=client.provider_name,
            ) from e.last_error

        content = (response.content or "").strip() if response is not None else ""
        if not content:
            raise ClassificationError(
                "Empty response from classifier", provider=client.provider_name,
            )

        logger.debug(
            "Classifier %s answered in %d ms (%d→%d tokens)",
            response.provider, response.latency_ms,
            response.input_tokens, response.output_tokens,
        )
        return content

    def _get_client(self, settings: ProcessingSettings) -> BaseLLMClient:
        provider = normalize_provider(settings.provider)
        if requires_api_key(provider) and not settings.api_key:
            raise ClassificationError(
                f"No API key configured for provider '{provider}'", provider=provider,
            )

        key = (provider, settings.model, settings.api_key, settings.base_url)
        client = self._clients.get(key)
        if client is None:
            try:
                client = self._client_factory(
                    provider, settings.model,
                    api_key=settings.api_key, base_url=settings.base_url,
                )
            except UnsupportedProviderError as e:
                raise ClassificationError(str(e), provider=provider) from e
            if not client.supports_vision:
                raise ClassificationError(
                    f"Model '{settings.model}' on '{provider}' does not accept images",
                    provider=provider,
                )
            self._clients[key] = client
        return client


def _describe_transport_error(error: LLMRetryExhausted) -> str:
    message = str(error.last_error) or type(error.last_error).__name__
    if error.error_type == "auth":
        return f"Authentication failed: {message}"
    if error.error_type in ("connection", "timeout"):
        return f"Network error: {message}"
    if error.attempts > 1:
        return f"{message} (after {error.attempts} attempts)"
    return message
