# src/config/settings.py — v3
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: classifier
selection and credentials, metadata limits, pacing, image preparation
bounds, storage locations and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediatagger.batch.models import ProcessingSettings
from mediatagger.llm.client_factory import default_model, normalize_provider


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MEDIATAGGER_",
        extra="ignore",
    )

    # === CLASSIFIER ===
    provider: str = "openai"
    model: str = "gpt-4o-mini"

    # Provider API keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""
    mistral_api_key: str = ""
    groq_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"

    # Optional endpoint override for OpenAI-compatible gateways
    base_url: str = ""

    # === METADATA LIMITS ===
    title_limit: int = 150
    description_limit: int = 150
    keyword_limit: int = 25
    include_place_name: bool = False

    # === PACING ===
    request_interval: float = 0.0

    # === IMAGE PREPARATION ===
    prepare_max_dimension: int = 256
    prepare_jpeg_quality: int = 50
    prepare_max_mb: float = 10.0

    # === STORAGE / EXPORT ===
    metadata_store_path: Path = Path("~/.mediatagger/metadata.json")
    export_dir: Path = Path("./export")
    export_platform: Literal["adobe_stock", "shutterstock"] = "adobe_stock"

    # === EMBEDDING ===
    exiftool_path: str = "exiftool"
    embed_backup: bool = False
    embed_sidecar: bool = False

    # === LOGGING ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Reject negative pacing and non-positive limits."""
        errors: list[str] = []

        if self.request_interval < 0:
            errors.append("REQUEST_INTERVAL must be >= 0")
        for name in ("title_limit", "description_limit", "keyword_limit"):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} must be > 0")
        if self.prepare_max_dimension <= 0:
            errors.append("PREPARE_MAX_DIMENSION must be > 0")
        if not 1 <= self.prepare_jpeg_quality <= 95:
            errors.append("PREPARE_JPEG_QUALITY must be between 1 and 95")
        if self.prepare_max_mb <= 0:
            errors.append("PREPARE_MAX_MB must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def prepare_max_bytes(self) -> int:
        return int(self.prepare_max_mb * 1024 * 1024)

    def api_key_for(self, provider: str) -> str:
        """Credential configured for ``provider`` ("" when none)."""
        return getattr(self, f"{provider.strip().lower()}_api_key", "")

    def base_url_for(self, provider: str) -> str | None:
        name = provider.strip().lower()
        if name == "ollama":
            return self.ollama_base_url or None
        return self.base_url or None

    def model_for(self, provider: str) -> str:
        """Configured model when ``provider`` is the configured one, else its default.

        Raises:
            ConfigurationError: If the provider has no default model.
        """
        if normalize_provider(provider) == normalize_provider(self.provider):
            return self.model
        model = default_model(provider)
        if model is None:
            raise ConfigurationError(
                f"No default model for provider {provider!r}; pass a model explicitly"
            )
        return model

    def processing_settings(self, **overrides: object) -> ProcessingSettings:
        """Build the immutable per-run settings, with optional overrides.

        Overriding ``provider`` without ``model`` picks that provider's
        default model instead of the configured one.
        """
        provider = str(overrides.pop("provider", None) or self.provider)
        model = overrides.pop("model", None) or self.model_for(provider)
        values: dict[str, object] = {
            "provider": provider,
            "model": model,
            "api_key": self.api_key_for(provider),
            "base_url": self.base_url_for(provider),
            "title_limit": self.title_limit,
            "description_limit": self.description_limit,
            "keyword_limit": self.keyword_limit,
            "include_place_name": self.include_place_name,
            "request_interval": self.request_interval,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ProcessingSettings(**values)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
