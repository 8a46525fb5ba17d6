"""Test helper utilities and in-memory fakes."""

import asyncio
import re
from pathlib import Path

from dictate_ai.exceptions import ModelPrewarmError, ProviderError
from dictate_ai.models.schema import DEFAULT_TRANSCRIPTION_MODEL, RecommendedModels
from dictate_ai.providers.base import ProgressCallback
from dictate_ai.providers.schema import EnhancementOptions, ProviderKind, RemoteAIModel


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text.

    Rich/Typer may emit ANSI codes even with NO_COLOR=1 in some CI environments.
    This helper ensures consistent text matching regardless of formatting.
    """
    ansi_pattern = re.compile(r"\x1b\[[0-9;]*m")
    return ansi_pattern.sub("", text)


def model(model_id: str, display_name: str | None = None) -> RemoteAIModel:
    """Catalog entry with the display name defaulting to the id."""
    return RemoteAIModel(id=model_id, display_name=display_name or model_id)


class FakeProvider:
    """Provider double that records calls and never touches the network.

    Set ``gate`` to an asyncio.Event to hold fetch_models() until it is set.
    """

    def __init__(
        self,
        kind: ProviderKind,
        models: list[RemoteAIModel] | None = None,
        available: bool = True,
        error: ProviderError | None = None,
    ) -> None:
        self.kind = kind
        self.base_url = f"http://{kind.value}.test"
        self.models = models or []
        self.available = available
        self.error = error
        self.gate: asyncio.Event | None = None
        self.result = "Enhanced text."
        self.calls: list[tuple] = []

    @property
    def name(self) -> str:
        return self.kind.display_name

    async def aclose(self) -> None:
        self.calls.append(("aclose",))

    async def is_available(self, credential: str | None = None) -> bool:
        self.calls.append(("is_available", credential))
        return self.available

    async def test_connection(self, credential: str | None = None) -> bool:
        self.calls.append(("test_connection", credential))
        return self.available

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        self.calls.append(("fetch_models", credential))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.models)

    async def enhance(
        self,
        text: str,
        model_id: str,
        options: EnhancementOptions,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        self.calls.append(("enhance", text, model_id, options, credential))
        if on_progress is not None:
            on_progress(1.0)
        return self.result

    async def analyze_image(
        self,
        image: bytes,
        model_id: str,
        prompt: str,
        system_prompt: str,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        self.calls.append(("analyze_image", image, model_id, prompt, system_prompt, credential))
        return "I'm working on a spreadsheet."

    def called(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class FakeModelRepository:
    """In-memory model repository.

    ``download_gates`` and ``prewarm_gates`` map a model name to an
    asyncio.Event the download or prewarm waits on before finishing.
    """

    def __init__(
        self,
        models_dir: Path,
        available: list[str] | None = None,
        downloaded: set[str] | None = None,
    ) -> None:
        self.models_dir = models_dir
        self.available = available or []
        self.downloaded = set(downloaded or ())
        self.recommended = RecommendedModels(
            default=DEFAULT_TRANSCRIPTION_MODEL,
            supported=[DEFAULT_TRANSCRIPTION_MODEL],
        )
        self.listing_error: Exception | None = None
        self.download_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.prewarm_error: Exception | None = None
        self.download_gates: dict[str, asyncio.Event] = {}
        self.prewarm_gates: dict[str, asyncio.Event] = {}
        self.prewarm_started: list[str] = []
        self.downloads: list[str] = []
        self.prewarmed: list[str] = []
        self.deleted: list[str] = []
        self.listings = 0

    async def get_available_models(self) -> list[str]:
        self.listings += 1
        if self.listing_error is not None:
            raise self.listing_error
        return list(self.available)

    async def get_recommended_models(self) -> RecommendedModels:
        return self.recommended

    async def is_model_downloaded(self, name: str) -> bool:
        return name in self.downloaded

    async def download_model(self, name: str, on_progress: ProgressCallback) -> None:
        self.downloads.append(name)
        on_progress(0.5)
        gate = self.download_gates.get(name)
        if gate is not None:
            await gate.wait()
        if self.download_error is not None:
            raise self.download_error
        self.downloaded.add(name)
        on_progress(1.0)

    async def delete_model(self, name: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(name)
        self.downloaded.discard(name)
        if name in self.available:
            self.available.remove(name)

    async def prewarm_model(self, name: str, on_progress: ProgressCallback) -> None:
        if self.prewarm_error is not None:
            raise self.prewarm_error
        if name not in self.downloaded:
            raise ModelPrewarmError(name, f"Model {name} is not downloaded")
        self.prewarm_started.append(name)
        gate = self.prewarm_gates.get(name)
        if gate is not None:
            await gate.wait()
        self.prewarmed.append(name)
        on_progress(1.0)
