"""Behavioral tests for the model lifecycle manager.

Tests verify:
- Catalog fetch joins download flags into the curated list
- A failing repository empties every list
- Selecting a downloaded model prewarms it; a newer selection cancels a stale prewarm
- Warm status only ever describes the selected model
- The newest download wins; the replaced one applies nothing
- Download and prewarm failures are recorded, leaving the model cold
- Deleting refreshes the catalog
"""

import asyncio
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from dictate_ai.config.store import SettingsStore
from dictate_ai.exceptions import ModelDownloadError, ModelPrewarmError
from dictate_ai.lifecycle import ModelLifecycleManager
from dictate_ai.models.schema import DEFAULT_TRANSCRIPTION_MODEL, ModelWarmStatus
from helpers import FakeModelRepository

TINY = "openai_whisper-tiny"
BASE = "openai_whisper-base"
LARGE = DEFAULT_TRANSCRIPTION_MODEL

ManagerFactory = Callable[[], ModelLifecycleManager]


class TestFetchModels:
    """Verify catalog refresh."""

    @pytest.mark.asyncio
    async def test_builds_catalog_with_download_flags(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.available = [TINY, BASE, LARGE]
        fake_repository.downloaded = {TINY}
        manager = make_manager()

        await manager.fetch_models()

        state = manager.state
        assert [(m.name, m.is_downloaded) for m in state.available_models] == [
            (TINY, True),
            (BASE, False),
            (LARGE, False),
        ]
        assert state.recommended_model == LARGE

    @pytest.mark.asyncio
    async def test_curated_flags_come_from_repository(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        """A downloaded flag in the curated file is ignored."""
        fake_repository.available = [TINY, LARGE]
        fake_repository.downloaded = {TINY}
        manager = make_manager()

        await manager.fetch_models()

        curated = {m.internal_name: m.is_downloaded for m in manager.state.curated_models}
        assert curated == {TINY: True, LARGE: False}

    @pytest.mark.asyncio
    async def test_repository_failure_empties_lists(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.available = [TINY]
        manager = make_manager()
        await manager.fetch_models()

        fake_repository.listing_error = OSError("offline")
        await manager.fetch_models()

        state = manager.state
        assert state.available_models == []
        assert state.curated_models == []
        assert state.recommended_model == ""

    def test_toggle_model_display(self, make_manager: ManagerFactory) -> None:
        manager = make_manager()

        assert manager.toggle_model_display() is True
        assert manager.toggle_model_display() is False


class TestSelectModel:
    """Verify model selection."""

    @pytest.mark.asyncio
    async def test_selecting_downloaded_model_prewarms(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository,
        settings_store: SettingsStore,
    ) -> None:
        fake_repository.downloaded = {TINY}
        manager = make_manager()

        await manager.select_model(TINY)

        assert fake_repository.prewarmed == [TINY]
        assert manager.warm_status is ModelWarmStatus.WARM
        assert manager.state.prewarm_progress == 1.0
        saved = SettingsStore(settings_store.path).load(reset_warm_status=False)
        assert saved.transcription.selected_model == TINY
        assert saved.transcription.warm_status is ModelWarmStatus.WARM

    @pytest.mark.asyncio
    async def test_selecting_missing_model_stays_cold(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        manager = make_manager()

        await manager.select_model(BASE)

        assert manager.selected_model == BASE
        assert manager.warm_status is ModelWarmStatus.COLD
        assert fake_repository.prewarmed == []

    @pytest.mark.asyncio
    async def test_switching_selection_cancels_stale_prewarm(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        """Only the newly selected model's prewarm result is applied."""
        fake_repository.downloaded = {TINY, BASE}
        fake_repository.prewarm_gates = {TINY: asyncio.Event()}
        manager = make_manager()

        selecting_tiny = asyncio.create_task(manager.select_model(TINY))
        while TINY not in fake_repository.prewarm_started:
            await asyncio.sleep(0)
        assert manager.warm_status is ModelWarmStatus.WARMING

        await manager.select_model(BASE)
        await selecting_tiny
        fake_repository.prewarm_gates[TINY].set()
        await manager.wait()

        assert manager.selected_model == BASE
        assert fake_repository.prewarmed == [BASE]
        assert manager.warm_status is ModelWarmStatus.WARM


class TestPrewarm:
    """Verify prewarm outcomes."""

    @pytest.mark.asyncio
    async def test_failure_leaves_model_cold(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.downloaded = {LARGE}
        fake_repository.prewarm_error = ModelPrewarmError(LARGE, "Failed to load model")
        manager = make_manager()

        await manager.prewarm()

        assert manager.warm_status is ModelWarmStatus.COLD
        assert manager.state.prewarm_error == "Failed to load model"

    @pytest.mark.asyncio
    async def test_skips_model_not_on_disk(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        manager = make_manager()

        await manager.prewarm(TINY)

        assert manager.warm_status is ModelWarmStatus.COLD
        assert manager.state.prewarm_error is None

    @pytest.mark.asyncio
    async def test_other_model_leaves_selected_status(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository,
        settings_store: SettingsStore,
    ) -> None:
        """Warm status always describes the selected model."""
        fake_repository.downloaded = {TINY, BASE}
        manager = make_manager()
        await manager.select_model(TINY)

        await manager.prewarm(BASE)

        assert fake_repository.prewarmed == [TINY, BASE]
        assert manager.warm_status is ModelWarmStatus.WARM
        saved = SettingsStore(settings_store.path).load(reset_warm_status=False)
        assert saved.transcription.warm_status is ModelWarmStatus.WARM

    @pytest.mark.asyncio
    async def test_other_model_does_not_cancel_selected_prewarm(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.downloaded = {TINY, BASE}
        fake_repository.prewarm_gates = {TINY: asyncio.Event()}
        manager = make_manager()

        selecting = asyncio.create_task(manager.select_model(TINY))
        while TINY not in fake_repository.prewarm_started:
            await asyncio.sleep(0)
        await manager.prewarm(BASE)

        assert manager.warm_status is ModelWarmStatus.WARMING
        fake_repository.prewarm_gates[TINY].set()
        await selecting

        assert fake_repository.prewarmed == [BASE, TINY]
        assert manager.warm_status is ModelWarmStatus.WARM


class TestDownload:
    """Verify downloads."""

    @pytest.mark.asyncio
    async def test_download_of_selected_model_chains_prewarm(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.available = [LARGE]
        manager = make_manager()
        await manager.fetch_models()

        await manager.download()

        state = manager.state
        assert fake_repository.downloads == [LARGE]
        assert state.is_downloading is False
        assert state.download_progress == 1.0
        assert state.downloading_model_name is None
        assert state.available_models[0].is_downloaded is True
        assert fake_repository.prewarmed == [LARGE]
        assert manager.warm_status is ModelWarmStatus.WARM

    @pytest.mark.asyncio
    async def test_download_of_other_model_does_not_prewarm(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        manager = make_manager()

        await manager.download(TINY)

        assert TINY in fake_repository.downloaded
        assert fake_repository.prewarmed == []

    @pytest.mark.asyncio
    async def test_newest_download_wins(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        """Starting a second download cancels the first, which applies nothing."""
        fake_repository.available = [TINY, BASE]
        fake_repository.download_gates = {TINY: asyncio.Event(), BASE: asyncio.Event()}
        manager = make_manager()
        await manager.fetch_models()

        first = asyncio.create_task(manager.download(TINY))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert manager.state.downloading_model_name == TINY

        second = asyncio.create_task(manager.download(BASE))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        fake_repository.download_gates[BASE].set()
        await second
        await first

        state = manager.state
        assert TINY not in fake_repository.downloaded
        assert [(m.name, m.is_downloaded) for m in state.available_models] == [
            (TINY, False),
            (BASE, True),
        ]
        assert state.download_progress == 1.0
        assert state.is_downloading is False
        assert state.download_error is None

    @pytest.mark.asyncio
    async def test_failure_records_error(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.available = [TINY]
        fake_repository.download_error = ModelDownloadError(TINY, "Failed to download: 503")
        manager = make_manager()
        await manager.fetch_models()

        await manager.download(TINY)

        state = manager.state
        assert state.download_error == "Failed to download: 503"
        assert state.download_progress == 0.0
        assert state.is_downloading is False
        assert state.available_models[0].is_downloaded is False

    @pytest.mark.asyncio
    async def test_cancel_download(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.download_gates = {TINY: asyncio.Event()}
        manager = make_manager()

        job = asyncio.create_task(manager.download(TINY))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        assert manager.cancel_download() is True
        await job

        assert manager.state.is_downloading is False
        assert manager.state.download_progress == 0.0
        assert TINY not in fake_repository.downloaded
        assert manager.cancel_download() is False


class TestDelete:
    """Verify deletion."""

    @pytest.mark.asyncio
    async def test_delete_refreshes_catalog(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.available = [TINY, LARGE]
        fake_repository.downloaded = {TINY}
        manager = make_manager()
        await manager.fetch_models()
        listings = fake_repository.listings

        await manager.delete(TINY)

        assert fake_repository.deleted == [TINY]
        assert fake_repository.listings == listings + 1
        assert [m.name for m in manager.state.available_models] == [LARGE]

    @pytest.mark.asyncio
    async def test_deleting_selected_model_makes_it_cold(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.downloaded = {LARGE}
        manager = make_manager()
        await manager.prewarm()
        assert manager.warm_status is ModelWarmStatus.WARM

        await manager.delete()

        assert manager.warm_status is ModelWarmStatus.COLD

    @pytest.mark.asyncio
    async def test_delete_failure_is_recorded(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        fake_repository.delete_error = ModelDownloadError(TINY, "Failed to delete: busy")
        manager = make_manager()

        await manager.delete(TINY)

        assert manager.state.download_error == "Failed to delete: busy"


class TestOpenStorageLocation:
    """Verify revealing the models folder."""

    def test_creates_folder_and_launches(
        self, make_manager: ManagerFactory, fake_repository: FakeModelRepository
    ) -> None:
        manager = make_manager()

        with patch("dictate_ai.lifecycle.typer.launch") as mock_launch:
            path = manager.open_storage_location()

        assert path == fake_repository.models_dir
        assert Path(path).is_dir()
        mock_launch.assert_called_once_with(str(path), locate=False)
