"""Download, warm-up and deletion of on-device transcription models.

ModelLifecycleManager owns the in-memory view of the model catalog and the
persisted transcription settings (selected model, warm status). Downloads and
prewarms run in the "download" and "prewarm" task slots: starting either one
cancels whatever was in that slot, so only the newest request is ever applied.
"""

from dataclasses import dataclass, field
from pathlib import Path

import typer

from dictate_ai.config.schema import TranscriptionSettings
from dictate_ai.config.store import SettingsStore
from dictate_ai.exceptions import ModelLifecycleError
from dictate_ai.logging import get_logger
from dictate_ai.models.curated import join_download_status, load_curated_models
from dictate_ai.models.repository import ModelRepository
from dictate_ai.models.schema import CuratedModelInfo, ModelInfo, ModelWarmStatus
from dictate_ai.tasks import KeyedTaskRunner

_logger = get_logger("Lifecycle")

DOWNLOAD_SLOT = "download"
PREWARM_SLOT = "prewarm"


@dataclass
class ModelLifecycleState:
    """In-memory model catalog and progress indicators."""

    available_models: list[ModelInfo] = field(default_factory=list)
    curated_models: list[CuratedModelInfo] = field(default_factory=list)
    recommended_model: str = ""
    show_all_models: bool = False
    is_downloading: bool = False
    download_progress: float = 0.0
    download_error: str | None = None
    downloading_model_name: str | None = None
    prewarm_progress: float = 0.0
    prewarm_error: str | None = None


class ModelLifecycleManager:
    """State machine for on-device model download and warm-up."""

    def __init__(
        self,
        store: SettingsStore,
        repository: ModelRepository,
        curated_path: Path | None = None,
    ) -> None:
        self._store = store
        self._repository = repository
        self._curated_path = curated_path
        self._runner = KeyedTaskRunner()
        # Bumped per download so late progress from a replaced one is ignored
        self._download_generation = 0
        self.state = ModelLifecycleState()

    @property
    def settings(self) -> TranscriptionSettings:
        return self._store.settings.transcription

    @property
    def selected_model(self) -> str:
        return self.settings.selected_model

    @property
    def warm_status(self) -> ModelWarmStatus:
        return self.settings.warm_status

    @property
    def models_dir(self) -> Path:
        return self._repository.models_dir

    def _set_warm_status(self, status: ModelWarmStatus) -> None:
        if self.settings.warm_status is not status:
            _logger.debug("Warm status {} -> {}", self.settings.warm_status.value, status.value)
        self.settings.warm_status = status
        self._store.save()

    async def wait(self) -> None:
        """Wait for the download and prewarm slots to settle."""
        await self._runner.wait_all()

    def cancel_all(self) -> None:
        self._runner.cancel_all()

    # -- Catalog ------------------------------------------------------------

    async def fetch_models(self) -> None:
        """Rebuild the catalog, download flags and curated list from the repository.

        A repository failure leaves every list empty.
        """
        try:
            recommended = await self._repository.get_recommended_models()
            names = await self._repository.get_available_models()
            available = [
                ModelInfo(name=name, is_downloaded=await self._repository.is_model_downloaded(name))
                for name in names
            ]
        except Exception as e:
            _logger.warning("Fetching models failed: {}", e)
            self.state.recommended_model = ""
            self.state.available_models = []
            self.state.curated_models = []
            return

        self.state.recommended_model = recommended.default
        self.state.available_models = available
        curated = load_curated_models(self._curated_path)
        self.state.curated_models = join_download_status(curated, available)
        _logger.info(
            "Fetched {} models ({} downloaded), recommended {}",
            len(available), sum(m.is_downloaded for m in available), recommended.default,
        )

    def _mark_downloaded(self, name: str, downloaded: bool) -> None:
        self.state.available_models = [
            m.model_copy(update={"is_downloaded": downloaded}) if m.name == name else m
            for m in self.state.available_models
        ]
        self.state.curated_models = [
            m.model_copy(update={"is_downloaded": downloaded}) if m.internal_name == name else m
            for m in self.state.curated_models
        ]

    async def is_downloaded(self, name: str | None = None) -> bool:
        return await self._repository.is_model_downloaded(name or self.selected_model)

    def toggle_model_display(self) -> bool:
        """Switch between the curated list and the full catalog."""
        self.state.show_all_models = not self.state.show_all_models
        return self.state.show_all_models

    # -- Selection ----------------------------------------------------------

    async def select_model(self, name: str) -> None:
        """Select ``name``; prewarm it right away when it is on disk."""
        if name != self.settings.selected_model:
            self._runner.cancel(PREWARM_SLOT)
        self.settings.selected_model = name
        self._set_warm_status(ModelWarmStatus.COLD)
        _logger.info("Selected model {}", name)

        if await self.is_downloaded(name):
            await self.prewarm(name)

    # -- Download -----------------------------------------------------------

    async def download(self, name: str | None = None) -> None:
        """Download ``name`` (default: the selected model).

        Replaces any download in flight; the replaced one applies nothing.
        """
        name = name or self.selected_model
        if not name:
            return
        self._download_generation += 1
        generation = self._download_generation

        self.state.is_downloading = True
        self.state.download_progress = 0.0
        self.state.download_error = None
        self.state.downloading_model_name = name

        finished = await self._runner.run(DOWNLOAD_SLOT, self._download(name, generation))
        if finished and name == self.selected_model:
            await self.prewarm(name)

    async def _download(self, name: str, generation: int) -> bool:
        def on_progress(fraction: float) -> None:
            if generation == self._download_generation:
                self.state.download_progress = fraction

        try:
            await self._repository.download_model(name, on_progress)
        except ModelLifecycleError as e:
            self._finish_download(generation)
            self.state.download_progress = 0.0
            self.state.download_error = str(e)
            self._mark_downloaded(name, False)
            _logger.error("Download of {} failed: {}", name, e)
            return False

        downloaded = await self._repository.is_model_downloaded(name)
        self._finish_download(generation)
        self.state.download_progress = 1.0
        self._mark_downloaded(name, downloaded)
        _logger.info("Download of {} finished", name)
        return downloaded

    def _finish_download(self, generation: int) -> None:
        if generation == self._download_generation:
            self.state.is_downloading = False
            self.state.downloading_model_name = None

    def cancel_download(self) -> bool:
        cancelled = self._runner.cancel(DOWNLOAD_SLOT)
        if cancelled:
            self._download_generation += 1
            self.state.is_downloading = False
            self.state.download_progress = 0.0
            self.state.downloading_model_name = None
        return cancelled

    # -- Prewarm ------------------------------------------------------------

    async def prewarm(self, name: str | None = None) -> None:
        """Load ``name`` (default: the selected model) ahead of first use.

        Failures are recorded and leave the model cold; it still works at
        first-use cost. Warm status tracks the selected model only, so
        prewarming any other model leaves it and the selected model's
        prewarm slot alone.
        """
        name = name or self.selected_model
        if not await self.is_downloaded(name):
            _logger.debug("Skipping prewarm of {}, not downloaded", name)
            return

        self.state.prewarm_error = None
        if name != self.selected_model:
            await self._runner.run(f"{PREWARM_SLOT}.{name}", self._prewarm(name))
            return

        self.state.prewarm_progress = 0.0
        self._set_warm_status(ModelWarmStatus.WARMING)
        await self._runner.run(PREWARM_SLOT, self._prewarm(name))

    async def _prewarm(self, name: str) -> None:
        def on_progress(fraction: float) -> None:
            if name == self.selected_model:
                self.state.prewarm_progress = fraction

        try:
            await self._repository.prewarm_model(name, on_progress)
        except ModelLifecycleError as e:
            self.state.prewarm_error = str(e)
            if name == self.selected_model:
                self._set_warm_status(ModelWarmStatus.COLD)
            _logger.warning("Prewarm of {} failed: {}", name, e)
            return

        if name == self.selected_model:
            self.state.prewarm_progress = 1.0
            self._set_warm_status(ModelWarmStatus.WARM)
            _logger.info("Model {} is warm", name)

    # -- Delete -------------------------------------------------------------

    async def delete(self, name: str | None = None) -> None:
        """Delete ``name`` (default: the selected model) and refresh the catalog."""
        name = name or self.selected_model
        if not name:
            return
        try:
            await self._repository.delete_model(name)
        except ModelLifecycleError as e:
            self.state.download_error = str(e)
            _logger.error("Delete of {} failed: {}", name, e)
            return

        if name == self.selected_model:
            self._runner.cancel(PREWARM_SLOT)
            self._set_warm_status(ModelWarmStatus.COLD)
        await self.fetch_models()

    def open_storage_location(self) -> Path:
        """Create the models folder if needed and reveal it in the file manager."""
        path = self.models_dir
        path.mkdir(parents=True, exist_ok=True)
        _logger.info("Opening {}", path)
        typer.launch(str(path), locate=False)
        return path
