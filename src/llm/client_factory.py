# src/llm/client_factory.py — v4
"""Factory: instantiate a vision LLM client from provider name.

Called by the classifier for each distinct (provider, model, credential)
combination found in the processing settings.
"""

from __future__ import annotations

import importlib
import logging

from mediatagger.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "anthropic": "mediatagger.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "openai": "mediatagger.llm.adapters.openai_adapter.OpenAIAdapter",
    "google": "mediatagger.llm.adapters.google_adapter.GoogleAdapter",
    "ollama": "mediatagger.llm.adapters.ollama_adapter.OllamaAdapter",
    "mistral": "mediatagger.llm.adapters.openai_adapter.OpenAIAdapter",
    "groq": "mediatagger.llm.adapters.openai_adapter.OpenAIAdapter",
}

# OpenAI-compatible providers and their endpoints
_COMPATIBLE_BASE_URLS: dict[str, str] = {
    "mistral": "https://api.mistral.ai/v1",
    "groq": "https://api.groq.com/openai/v1",
}

# Local providers that run without a credential
_KEYLESS_PROVIDERS = {"ollama"}

# Vision-capable model used when a provider is picked without a model
_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o-mini",
    "google": "gemini-2.0-flash",
    "ollama": "llava",
    "mistral": "pixtral-12b-2409",
    "groq": "meta-llama/llama-4-scout-17b-16e-instruct",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def normalize_provider(provider: str) -> str:
    """Lower-case and trim a provider id ("Groq" → "groq")."""
    return provider.strip().lower()


def requires_api_key(provider: str) -> bool:
    """Whether the provider needs a credential to be called."""
    return normalize_provider(provider) not in _KEYLESS_PROVIDERS


def available_providers() -> list[str]:
    return sorted(_PROVIDER_REGISTRY)


def default_model(provider: str) -> str | None:
    """Default vision model for a provider, None when unknown."""
    return _DEFAULT_MODELS.get(normalize_provider(provider))


def create_llm_client(
    provider: str,
    model: str,
    api_key: str = "",
    base_url: str | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (case-insensitive).
        model: Model name (e.g. gpt-4o-mini, pixtral-12b-2409).
        api_key: Provider credential (ignored by local providers).
        base_url: Endpoint override (Ollama host, OpenAI-compatible gateway).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    name = normalize_provider(provider)
    if name not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {provider!r}. "
            f"Available: {', '.join(available_providers())}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[name])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if name == "ollama":
        if base_url:
            init_kwargs.setdefault("host", base_url)
    else:
        init_kwargs.setdefault("api_key", api_key)

    if name in _COMPATIBLE_BASE_URLS or (name == "openai" and base_url):
        init_kwargs.setdefault("base_url", base_url or _COMPATIBLE_BASE_URLS[name])
        init_kwargs.setdefault("provider", name)

    logger.debug("Creating LLM client: provider=%s, model=%s", name, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str, model: str | None = None) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
        model: Optional default model for the provider.
    """
    _PROVIDER_REGISTRY[normalize_provider(name)] = class_path
    if model:
        _DEFAULT_MODELS[normalize_provider(name)] = model
    logger.info("Registered LLM provider: %s → %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
