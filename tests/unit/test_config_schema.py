"""Behavioral tests for configuration and settings schema validation.

Tests verify public behavior of the Pydantic models:
- Default value application
- Value constraint validation
- Provider identity helpers
- Credential lookup never leaks keys for local providers
"""

import pytest
from pydantic import ValidationError

from dictate_ai.config.schema import (
    DictateConfig,
    DictateSettings,
    EnhancementSettings,
    LoggingConfig,
)
from dictate_ai.models.schema import DEFAULT_TRANSCRIPTION_MODEL, ModelWarmStatus
from dictate_ai.providers.schema import ProviderCategory, ProviderKind


class TestDefaults:
    """Verify models initialize with usable defaults."""

    def test_config_defaults(self) -> None:
        config = DictateConfig()

        assert config.endpoints.ollama_url == "http://localhost:11434"
        assert config.endpoints.lmstudio_url == "http://localhost:1234"
        assert config.logging.level == "INFO"

    def test_settings_defaults(self) -> None:
        settings = DictateSettings()

        assert settings.enhancement.enabled is False
        assert settings.enhancement.active_provider is ProviderKind.OLLAMA
        assert settings.enhancement.credentials == {}
        assert settings.transcription.selected_model == DEFAULT_TRANSCRIPTION_MODEL
        assert settings.transcription.warm_status is ModelWarmStatus.COLD


class TestConstraints:
    """Verify out-of-range values are rejected."""

    @pytest.mark.parametrize("temperature", [-0.1, 1.5])
    def test_rejects_temperature_out_of_range(self, temperature: float) -> None:
        with pytest.raises(ValidationError):
            EnhancementSettings(temperature=temperature)

    def test_rejects_unknown_log_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")

    def test_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValidationError):
            EnhancementSettings.model_validate({"active_provider": "openai"})

    def test_credentials_keyed_by_provider_value(self) -> None:
        settings = EnhancementSettings.model_validate({"credentials": {"groq": "gsk-1"}})

        assert settings.credentials == {ProviderKind.GROQ: "gsk-1"}


class TestProviderKind:
    """Verify provider identity helpers."""

    @pytest.mark.parametrize(
        ("kind", "category"),
        [
            (ProviderKind.OLLAMA, ProviderCategory.LOCAL),
            (ProviderKind.LMSTUDIO, ProviderCategory.LOCAL),
            (ProviderKind.GROQ, ProviderCategory.REMOTE),
            (ProviderKind.GEMINI, ProviderCategory.REMOTE),
        ],
    )
    def test_category(self, kind: ProviderKind, category: ProviderCategory) -> None:
        assert kind.category is category
        assert kind.is_local is (category is ProviderCategory.LOCAL)

    def test_display_names(self) -> None:
        assert [kind.display_name for kind in ProviderKind] == [
            "Ollama (Local)",
            "LM Studio (Local)",
            "Groq (Remote)",
            "Gemini (Remote)",
        ]


class TestCredentialFor:
    """Verify credential lookup."""

    def test_local_provider_never_has_credential(self) -> None:
        settings = EnhancementSettings(credentials={ProviderKind.OLLAMA: "ignored"})

        assert settings.credential_for(ProviderKind.OLLAMA) is None

    def test_empty_key_is_treated_as_missing(self) -> None:
        settings = EnhancementSettings(credentials={ProviderKind.GEMINI: ""})

        assert settings.credential_for(ProviderKind.GEMINI) is None
