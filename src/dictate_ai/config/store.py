"""JSON-file persistence for the user settings record.

The store owns one DictateSettings instance. Components mutate it through
their own single entry point and then call save().
"""

import os
from pathlib import Path

from dictate_ai.config.schema import DEFAULT_SETTINGS_PATH, DictateSettings
from dictate_ai.logging import get_logger
from dictate_ai.models.schema import ModelWarmStatus

_logger = get_logger("Config.store")


class SettingsStore:
    """Loads and saves DictateSettings as JSON."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_SETTINGS_PATH
        self._settings: DictateSettings | None = None

    @property
    def settings(self) -> DictateSettings:
        """Current settings, loaded on first access."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self, reset_warm_status: bool = True) -> DictateSettings:
        """Read settings from disk.

        Missing keys take their defaults; an unreadable file falls back to
        defaults. Models are never resident across restarts, so the warm
        status is reset to cold unless told otherwise.
        """
        settings = DictateSettings()
        if self.path.exists():
            try:
                settings = DictateSettings.model_validate_json(self.path.read_bytes())
                _logger.debug("Loaded settings from {}", self.path)
            except (OSError, ValueError) as e:
                # ValidationError and UnicodeDecodeError are both ValueErrors
                _logger.warning("Ignoring unreadable settings file {}: {}", self.path, e)
        else:
            _logger.debug("No settings file at {}, using defaults", self.path)

        if reset_warm_status:
            settings.transcription.warm_status = ModelWarmStatus.COLD

        self._settings = settings
        return settings

    def save(self) -> None:
        """Write the current settings atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(self.settings.model_dump_json(indent=2))
        os.replace(tmp_path, self.path)
        _logger.debug("Saved settings to {}", self.path)
