# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediatagger.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_classifier(self):
        s = Settings(_env_file=None)
        assert s.provider == "openai"
        assert s.model == "gpt-4o-mini"

    def test_default_pacing_and_limits(self):
        s = Settings(_env_file=None)
        assert s.request_interval == 0.0
        assert (s.title_limit, s.description_limit, s.keyword_limit) == (150, 150, 25)

    def test_default_preparation(self):
        s = Settings(_env_file=None)
        assert s.prepare_max_dimension == 256
        assert s.prepare_jpeg_quality == 50
        assert s.prepare_max_bytes == 10 * 1024 * 1024

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_level == "INFO"
        assert s.log_format == "text"
        assert s.log_file is None


class TestSettingsValidation:
    def test_negative_interval(self):
        with pytest.raises(ConfigurationError, match="REQUEST_INTERVAL"):
            Settings(_env_file=None, request_interval=-0.5)

    def test_zero_keyword_limit(self):
        with pytest.raises(ConfigurationError, match="KEYWORD_LIMIT"):
            Settings(_env_file=None, keyword_limit=0)

    def test_bad_jpeg_quality(self):
        with pytest.raises(ConfigurationError, match="PREPARE_JPEG_QUALITY"):
            Settings(_env_file=None, prepare_jpeg_quality=100)

    def test_errors_are_combined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, title_limit=0, prepare_max_mb=0)
        assert "TITLE_LIMIT" in str(exc_info.value)
        assert "PREPARE_MAX_MB" in str(exc_info.value)


class TestEnvironment:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MEDIATAGGER_PROVIDER", "groq")
        monkeypatch.setenv("MEDIATAGGER_GROQ_API_KEY", "gsk-123")
        monkeypatch.setenv("MEDIATAGGER_REQUEST_INTERVAL", "2.5")
        s = Settings(_env_file=None)
        assert s.provider == "groq"
        assert s.api_key_for("groq") == "gsk-123"
        assert s.request_interval == 2.5

    def test_env_file(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("MEDIATAGGER_MODEL=gpt-4o\nUNRELATED=1\n")
        s = Settings(_env_file=env)
        assert s.model == "gpt-4o"

    def test_load_settings_overrides(self):
        s = load_settings(_env_file=None, keyword_limit=49, log_file=Path("/tmp/x.log"))
        assert s.keyword_limit == 49
        assert s.log_file == Path("/tmp/x.log")


class TestProcessingSettings:
    def test_carries_configured_values(self):
        s = Settings(
            _env_file=None, openai_api_key="sk-a", keyword_limit=30,
            include_place_name=True, request_interval=1.0,
        )
        ps = s.processing_settings()
        assert ps.provider == "openai"
        assert ps.api_key == "sk-a"
        assert ps.keyword_limit == 30
        assert ps.include_place_name is True
        assert ps.request_interval == 1.0
        assert ps.base_url is None

    def test_provider_override_picks_matching_key(self):
        s = Settings(_env_file=None, openai_api_key="sk-a", anthropic_api_key="sk-ant")
        ps = s.processing_settings(provider="anthropic", model="claude-3-5-haiku-latest")
        assert ps.provider == "anthropic"
        assert ps.api_key == "sk-ant"
        assert ps.model == "claude-3-5-haiku-latest"

    def test_none_overrides_ignored(self):
        s = Settings(_env_file=None, request_interval=3.0)
        ps = s.processing_settings(provider=None, model=None, request_interval=None)
        assert ps.provider == "openai"
        assert ps.model == "gpt-4o-mini"
        assert ps.request_interval == 3.0

    def test_ollama_uses_host(self):
        s = Settings(_env_file=None, ollama_base_url="http://gpu:11434")
        ps = s.processing_settings(provider="ollama")
        assert ps.base_url == "http://gpu:11434"
        assert ps.api_key == ""

    def test_unknown_provider_has_no_key(self):
        assert Settings(_env_file=None).api_key_for("acme") == ""

    def test_provider_override_without_model_uses_provider_default(self):
        s = Settings(_env_file=None, anthropic_api_key="sk-ant")
        ps = s.processing_settings(provider="anthropic")
        assert ps.provider == "anthropic"
        assert ps.model.startswith("claude")
        assert ps.model != "gpt-4o-mini"

    def test_same_provider_keeps_configured_model(self):
        s = Settings(_env_file=None, provider="mistral", model="pixtral-large-2411")
        assert s.processing_settings(provider="Mistral").model == "pixtral-large-2411"

    def test_provider_without_default_model_requires_model(self):
        s = Settings(_env_file=None)
        with pytest.raises(ConfigurationError, match="No default model"):
            s.processing_settings(provider="acme")
        assert s.processing_settings(provider="acme", model="m").model == "m"


class TestEmbedDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.exiftool_path == "exiftool"
        assert s.embed_backup is False
        assert s.embed_sidecar is False
        assert s.export_platform == "adobe_stock"
