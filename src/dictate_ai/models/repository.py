"""On-device transcription model storage.

ModelRepository is the contract the lifecycle manager depends on.
HuggingFaceModelRepository implements it against the WhisperKit CoreML
repository on the Hugging Face Hub, keeping one folder per model variant:

    <models_dir>/argmaxinc/whisperkit-coreml/<variant>/

A variant folder counts as downloaded only when it carries COMPLETE_MARKER.

Blocking Hub and disk work runs in worker threads; progress is handed back to
the event loop with call_soon_threadsafe.
"""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from huggingface_hub import HfApi, snapshot_download
from huggingface_hub.hf_api import RepoFolder
from tqdm.auto import tqdm

from dictate_ai.exceptions import ModelDownloadError, ModelPrewarmError
from dictate_ai.hardware import get_memory_gb
from dictate_ai.logging import get_logger
from dictate_ai.models.schema import DEFAULT_TRANSCRIPTION_MODEL, RecommendedModels

_logger = get_logger("Models.repository")

WHISPERKIT_REPO = "argmaxinc/whisperkit-coreml"

ProgressCallback = Callable[[float], None]

# (minimum unified memory in GB, model) from smallest to largest
_MEMORY_TIERS: list[tuple[float, str]] = [
    (0, "openai_whisper-tiny"),
    (4, "openai_whisper-base"),
    (6, "openai_whisper-small"),
    (8, "openai_whisper-large-v3-v20240930_turbo"),
    (16, DEFAULT_TRANSCRIPTION_MODEL),
]

_PREWARM_CHUNK = 4 * 1024 * 1024

# Written into a model folder once its download has fully landed
COMPLETE_MARKER = ".download-complete"


class ModelRepository(Protocol):
    """Storage backend for downloadable transcription models."""

    models_dir: Path

    async def get_available_models(self) -> list[str]: ...

    async def get_recommended_models(self) -> RecommendedModels: ...

    async def is_model_downloaded(self, name: str) -> bool: ...

    async def download_model(self, name: str, on_progress: ProgressCallback) -> None: ...

    async def delete_model(self, name: str) -> None: ...

    async def prewarm_model(self, name: str, on_progress: ProgressCallback) -> None: ...


def recommend_for_memory(memory_gb: float | None) -> RecommendedModels:
    """Pick the default and supported models for the given unified memory.

    Unknown memory (not Apple Silicon) gets the default model alone.
    """
    if memory_gb is None:
        return RecommendedModels(
            default=DEFAULT_TRANSCRIPTION_MODEL,
            supported=[DEFAULT_TRANSCRIPTION_MODEL],
        )

    supported = [name for min_gb, name in _MEMORY_TIERS if memory_gb >= min_gb]
    return RecommendedModels(default=supported[-1], supported=supported)


def _threadsafe(callback: ProgressCallback, loop: asyncio.AbstractEventLoop) -> ProgressCallback:
    """Wrap ``callback`` so calls from a worker thread run on ``loop``."""

    def deliver(fraction: float) -> None:
        if not loop.is_closed():
            loop.call_soon_threadsafe(callback, fraction)

    return deliver


def _progress_bar_class(callback: ProgressCallback) -> type[tqdm]:
    """tqdm subclass that reports its completed fraction to ``callback``."""

    class _ReportingBar(tqdm):
        def update(self, n: float | None = 1) -> bool | None:
            displayed = super().update(n)
            if self.total:
                callback(min(1.0, self.n / self.total))
            return displayed

    return _ReportingBar


class HuggingFaceModelRepository:
    """WhisperKit CoreML models from the Hugging Face Hub."""

    def __init__(
        self,
        models_dir: Path,
        repo_id: str = WHISPERKIT_REPO,
        api: HfApi | None = None,
    ) -> None:
        self.models_dir = models_dir
        self.repo_id = repo_id
        self._api = api or HfApi()

    @property
    def repo_dir(self) -> Path:
        return self.models_dir.joinpath(*self.repo_id.split("/"))

    def model_path(self, name: str) -> Path:
        """Folder holding ``name``.

        Raises:
            ModelDownloadError: If the name could escape the repository folder.
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise ModelDownloadError(name, f"Invalid model name: {name!r}")
        return self.repo_dir / name

    # -- Catalog ------------------------------------------------------------

    async def get_available_models(self) -> list[str]:
        """List model variants on the Hub, or local ones when offline.

        Raises:
            Exception: The Hub error, when there is no local folder to fall back on.
        """
        try:
            names = await asyncio.to_thread(self._list_remote_models)
        except Exception as e:
            _logger.warning("Listing {} failed, using local models: {}", self.repo_id, e)
            if not self.repo_dir.is_dir():
                raise
            return await asyncio.to_thread(self._list_local_models)

        _logger.info("Found {} models in {}", len(names), self.repo_id)
        return names

    def _list_remote_models(self) -> list[str]:
        entries = self._api.list_repo_tree(self.repo_id, recursive=False)
        return sorted(
            entry.path
            for entry in entries
            if isinstance(entry, RepoFolder) and "whisper" in entry.path
        )

    def _list_local_models(self) -> list[str]:
        return sorted(
            child.name
            for child in self.repo_dir.iterdir()
            if child.is_dir() and not child.name.startswith(".") and self._has_model_files(child)
        )

    async def get_recommended_models(self) -> RecommendedModels:
        memory_gb = await asyncio.to_thread(get_memory_gb)
        recommended = recommend_for_memory(memory_gb)
        _logger.debug("Recommended model for {}GB: {}", memory_gb, recommended.default)
        return recommended

    async def is_model_downloaded(self, name: str) -> bool:
        try:
            path = self.model_path(name)
        except ModelDownloadError:
            return False
        return await asyncio.to_thread(self._has_model_files, path)

    @staticmethod
    def _has_model_files(path: Path) -> bool:
        """A model folder counts only once its download was completed and moved in."""
        return (path / COMPLETE_MARKER).is_file()

    @staticmethod
    def _has_model_bundles(path: Path) -> bool:
        if not path.is_dir():
            return False
        try:
            entries = [child.name for child in path.iterdir()]
        except OSError:
            return False
        return any(entry.endswith(".mlmodelc") or "model" in entry.lower() for entry in entries)

    # -- Download / delete --------------------------------------------------

    async def download_model(self, name: str, on_progress: ProgressCallback) -> None:
        """Download one model folder, reporting fractional progress.

        Files land in a hidden staging folder first. The model folder only
        appears, marked complete, after every file has arrived, so an
        interrupted or abandoned download never counts as downloaded.

        Raises:
            ModelDownloadError: On any Hub or filesystem failure, or when the
                download holds no model files.
        """
        path = self.model_path(name)
        if await self.is_model_downloaded(name):
            _logger.info("Model {} already downloaded", name)
            on_progress(1.0)
            return

        report = _threadsafe(on_progress, asyncio.get_running_loop())
        _logger.info("Downloading {} from {}", name, self.repo_id)
        try:
            await asyncio.to_thread(self._download, name, report)
        except ModelDownloadError:
            raise
        except Exception as e:
            _logger.error("Download of {} failed: {}", name, e)
            raise ModelDownloadError(name, f"Failed to download {name}: {e}") from e

        on_progress(1.0)
        _logger.info("Downloaded {} to {}", name, path)

    def _download(self, name: str, report: ProgressCallback) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=".download-", dir=self.repo_dir))
        try:
            snapshot_download(
                repo_id=self.repo_id,
                allow_patterns=[f"{name}/*"],
                local_dir=staging,
                tqdm_class=_progress_bar_class(report),
            )
            staged = staging / name
            if not self._has_model_bundles(staged):
                raise ModelDownloadError(name, f"No model files found for {name} in {self.repo_id}")
            (staged / COMPLETE_MARKER).touch()

            target = self.repo_dir / name
            if target.exists():
                shutil.rmtree(target)
            staged.rename(target)
        finally:
            shutil.rmtree(staging, ignore_errors=True)

    async def delete_model(self, name: str) -> None:
        path = self.model_path(name)
        if not path.exists():
            _logger.debug("Model {} not on disk, nothing to delete", name)
            return
        try:
            await asyncio.to_thread(shutil.rmtree, path)
        except OSError as e:
            raise ModelDownloadError(name, f"Failed to delete {name}: {e}") from e
        _logger.info("Deleted model {}", name)

    # -- Prewarm ------------------------------------------------------------

    async def prewarm_model(self, name: str, on_progress: ProgressCallback) -> None:
        """Read every model file once so the OS page cache holds it.

        Raises:
            ModelPrewarmError: If the model is missing or unreadable.
        """
        if not await self.is_model_downloaded(name):
            raise ModelPrewarmError(name, f"Model {name} is not downloaded")

        report = _threadsafe(on_progress, asyncio.get_running_loop())
        _logger.info("Prewarming {}", name)
        try:
            await asyncio.to_thread(self._read_all, self.model_path(name), report)
        except OSError as e:
            raise ModelPrewarmError(name, f"Failed to load {name}: {e}") from e
        on_progress(1.0)

    @staticmethod
    def _read_all(path: Path, report: ProgressCallback) -> None:
        files = [f for f in path.rglob("*") if f.is_file()]
        total = sum(f.stat().st_size for f in files) or 1
        done = 0
        for file in files:
            with open(file, "rb") as handle:
                while chunk := handle.read(_PREWARM_CHUNK):
                    done += len(chunk)
                    report(min(1.0, done / total))
