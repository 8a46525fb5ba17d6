"""Behavioral tests for the settings store.

Tests verify:
- Missing or unreadable files yield defaults
- Saved settings survive a reload
- Missing keys take their defaults
- Warm status is reset to cold on load
"""

import json
from pathlib import Path

from dictate_ai.config.schema import DictateSettings
from dictate_ai.config.store import SettingsStore
from dictate_ai.models.schema import ModelWarmStatus
from dictate_ai.providers.schema import ProviderKind


class TestSettingsStoreLoad:
    """Verify loading from disk."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """A store without a file should expose default settings."""
        store = SettingsStore(tmp_path / "settings.json")

        assert store.settings == DictateSettings()

    def test_corrupt_file_gives_defaults(self, tmp_path: Path) -> None:
        """An unparsable file should be ignored rather than crash the app."""
        path = tmp_path / "settings.json"
        path.write_text("{not json")

        store = SettingsStore(path)

        assert store.settings == DictateSettings()

    def test_invalid_utf8_file_gives_defaults(self, tmp_path: Path) -> None:
        """A file that is not valid UTF-8 should fall back to defaults."""
        path = tmp_path / "settings.json"
        path.write_bytes(b'{"enhancement": {"prompt": "\xff\xfe"}}')

        store = SettingsStore(path)

        assert store.load() == DictateSettings()

    def test_missing_keys_take_defaults(self, tmp_path: Path) -> None:
        """A partial record should fill the gaps with defaults."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"enhancement": {"active_provider": "groq"}}))

        settings = SettingsStore(path).settings

        assert settings.enhancement.active_provider is ProviderKind.GROQ
        assert settings.enhancement.temperature == 0.3
        assert settings.transcription == DictateSettings().transcription

    def test_warm_status_is_reset_on_load(self, tmp_path: Path) -> None:
        """Models are never resident after a restart."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"transcription": {"warm_status": "warm"}}))

        assert SettingsStore(path).settings.transcription.warm_status is ModelWarmStatus.COLD

    def test_warm_status_can_be_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"transcription": {"warm_status": "warm"}}))

        settings = SettingsStore(path).load(reset_warm_status=False)

        assert settings.transcription.warm_status is ModelWarmStatus.WARM


class TestSettingsStoreSave:
    """Verify persistence."""

    def test_saved_settings_survive_reload(self, tmp_path: Path) -> None:
        """Changes saved by one store should be read back by another."""
        path = tmp_path / "nested" / "settings.json"
        store = SettingsStore(path)
        store.settings.enhancement.active_provider = ProviderKind.GEMINI
        store.settings.enhancement.credentials[ProviderKind.GEMINI] = "AIza-test"
        store.settings.transcription.selected_model = "openai_whisper-small"
        store.save()

        reloaded = SettingsStore(path).settings

        assert reloaded.enhancement.active_provider is ProviderKind.GEMINI
        assert reloaded.enhancement.credential_for(ProviderKind.GEMINI) == "AIza-test"
        assert reloaded.transcription.selected_model == "openai_whisper-small"

    def test_save_leaves_no_temporary_file(self, tmp_path: Path) -> None:
        store = SettingsStore(tmp_path / "settings.json")
        store.save()

        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]


class TestCredentialLookup:
    """Verify credential_for() on the enhancement record."""

    def test_local_providers_have_no_credential(self) -> None:
        """Local providers never report a key, even if one was stored."""
        settings = DictateSettings()
        settings.enhancement.credentials[ProviderKind.OLLAMA] = "ignored"

        assert settings.enhancement.credential_for(ProviderKind.OLLAMA) is None

    def test_empty_credential_counts_as_missing(self) -> None:
        settings = DictateSettings()
        settings.enhancement.credentials[ProviderKind.GROQ] = ""

        assert settings.enhancement.credential_for(ProviderKind.GROQ) is None
