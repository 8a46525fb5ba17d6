"""Pydantic configuration schema models for dictate-ai.

Two kinds of configuration live here:
- DictateConfig: static, file-based settings (endpoints, storage, logging)
- DictateSettings: the user-editable record persisted by SettingsStore
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from dictate_ai.models.schema import DEFAULT_TRANSCRIPTION_MODEL, ModelWarmStatus
from dictate_ai.providers.schema import (
    DEFAULT_ENHANCEMENT_PROMPT,
    DEFAULT_IMAGE_ANALYSIS_PROMPT,
    ProviderKind,
)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "dictate-ai" / "settings.json"
DEFAULT_MODELS_DIR = Path.home() / ".local" / "share" / "dictate-ai" / "models"


class EndpointsConfig(BaseModel):
    """Base URLs for every provider."""

    ollama_url: str = "http://localhost:11434"
    lmstudio_url: str = "http://localhost:1234"
    groq_url: str = "https://api.groq.com/openai/v1"
    gemini_url: str = "https://generativelanguage.googleapis.com/v1beta"


class StorageConfig(BaseModel):
    """Filesystem locations."""

    settings_path: Path = DEFAULT_SETTINGS_PATH
    models_dir: Path = DEFAULT_MODELS_DIR


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class DictateConfig(BaseModel):
    """Complete static configuration."""

    endpoints: EndpointsConfig = Field(default_factory=EndpointsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ProviderSelection(BaseModel):
    """Text and image model last chosen with one provider."""

    text_model: str
    image_model: str


class EnhancementSettings(BaseModel):
    """Persisted AI enhancement preferences."""

    enabled: bool = False
    active_provider: ProviderKind = ProviderKind.OLLAMA
    credentials: dict[ProviderKind, str] = Field(default_factory=dict)
    selected_text_model: str = "gemma3"
    selected_image_model: str = "gemma3n"
    # Selections of the inactive providers, restored when switching back
    provider_selections: dict[ProviderKind, ProviderSelection] = Field(default_factory=dict)
    temperature: float = Field(0.3, ge=0.0, le=1.0)
    max_tokens: int = Field(1000, ge=1)
    prompt: str = DEFAULT_ENHANCEMENT_PROMPT
    image_prompt: str = DEFAULT_IMAGE_ANALYSIS_PROMPT

    def credential_for(self, provider: ProviderKind) -> str | None:
        """Return the stored API key, or None for local or unset providers."""
        if provider.is_local:
            return None
        return self.credentials.get(provider) or None


class TranscriptionSettings(BaseModel):
    """Persisted on-device model selection and warm status."""

    selected_model: str = DEFAULT_TRANSCRIPTION_MODEL
    warm_status: ModelWarmStatus = ModelWarmStatus.COLD


class DictateSettings(BaseModel):
    """The full persisted settings record."""

    enhancement: EnhancementSettings = Field(default_factory=EnhancementSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
