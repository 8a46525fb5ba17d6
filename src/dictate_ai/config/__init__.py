"""Configuration module for dictate-ai."""

from dictate_ai.config.loader import discover_config_path, load_config
from dictate_ai.config.schema import (
    DictateConfig,
    DictateSettings,
    EndpointsConfig,
    EnhancementSettings,
    LoggingConfig,
    StorageConfig,
    TranscriptionSettings,
)
from dictate_ai.config.store import SettingsStore
from dictate_ai.exceptions import ConfigError

__all__ = [
    "ConfigError",
    "DictateConfig",
    "DictateSettings",
    "EndpointsConfig",
    "EnhancementSettings",
    "LoggingConfig",
    "SettingsStore",
    "StorageConfig",
    "TranscriptionSettings",
    "discover_config_path",
    "load_config",
]
