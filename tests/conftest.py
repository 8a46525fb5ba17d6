"""Pytest configuration and shared fixtures."""

import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

# Configure consistent terminal settings for Rich/Typer in CI environments
# This ensures help output is not truncated or wrapped differently
os.environ.setdefault("COLUMNS", "200")  # Wide terminal to prevent wrapping
os.environ.setdefault("LINES", "50")
os.environ.setdefault("TERM", "xterm-256color")  # Standard terminal type

from dictate_ai.config.store import SettingsStore
from dictate_ai.hardware.apple_silicon import AppleSiliconInfo
from dictate_ai.lifecycle import ModelLifecycleManager
from dictate_ai.orchestrator import EnhancementOrchestrator
from dictate_ai.providers.schema import ProviderKind
from helpers import FakeModelRepository, FakeProvider


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Provide a temporary directory for test isolation."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_toml(temp_dir: Path) -> Path:
    """Create a sample config.toml for testing."""
    config_path = temp_dir / "config.toml"
    config_path.write_text(f"""
[endpoints]
ollama_url = "http://127.0.0.1:11500"
groq_url = "https://groq.example/openai/v1"

[storage]
settings_path = "{temp_dir / 'settings.json'}"
models_dir = "{temp_dir / 'models'}"

[logging]
level = "DEBUG"
""")
    return config_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner with consistent terminal settings.

    Sets environment variables to ensure Rich/Typer produces consistent
    output across different environments (local vs CI).
    """
    return CliRunner(
        env={
            "COLUMNS": "200",  # Wide terminal to prevent line wrapping
            "LINES": "50",
            "TERM": "xterm-256color",
            "NO_COLOR": "1",  # Disable Rich's fancy formatting
        }
    )


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    """Settings store backed by a file in a temporary directory."""
    return SettingsStore(tmp_path / "settings.json")


@pytest.fixture
def fake_providers() -> dict[ProviderKind, FakeProvider]:
    """One fake provider per kind, without catalogs."""
    return {kind: FakeProvider(kind) for kind in ProviderKind}


@pytest.fixture
def orchestrator(
    settings_store: SettingsStore,
    fake_providers: dict[ProviderKind, FakeProvider],
) -> EnhancementOrchestrator:
    """Orchestrator wired to the fake providers."""
    return EnhancementOrchestrator(settings_store, provider_factory=fake_providers.__getitem__)


@pytest.fixture
def fake_repository(tmp_path: Path) -> FakeModelRepository:
    """In-memory model repository rooted in a temporary directory."""
    return FakeModelRepository(tmp_path / "models")


@pytest.fixture
def curated_json(tmp_path: Path) -> Path:
    """Curated definitions file with two entries."""
    path = tmp_path / "curated.json"
    path.write_text("""[
  {"display_name": "Tiny", "internal_name": "openai_whisper-tiny",
   "size_label": "Tiny", "accuracy_stars": 1, "speed_stars": 5,
   "storage_size_label": "75MB"},
  {"display_name": "Large", "internal_name": "openai_whisper-large-v3-v20240930",
   "size_label": "Large", "accuracy_stars": 5, "speed_stars": 2,
   "storage_size_label": "3GB", "is_downloaded": true}
]""")
    return path


@pytest.fixture
def make_manager(
    settings_store: SettingsStore,
    fake_repository: FakeModelRepository,
    curated_json: Path,
) -> Callable[[], ModelLifecycleManager]:
    """Factory for lifecycle managers sharing the fake repository."""

    def make() -> ModelLifecycleManager:
        return ModelLifecycleManager(settings_store, fake_repository, curated_path=curated_json)

    return make


# Hardware fixtures for testing hardware-dependent functionality


@pytest.fixture
def mock_hardware_16gb() -> AppleSiliconInfo:
    """Create mock hardware info for an M2 with 16GB."""
    return AppleSiliconInfo(chip_name="Apple M2", memory_gb=16.0, cpu_cores=8)


@pytest.fixture
def mock_hardware_8gb() -> AppleSiliconInfo:
    """Create mock hardware info for an M1 with 8GB."""
    return AppleSiliconInfo(chip_name="Apple M1", memory_gb=8.0, cpu_cores=8)
