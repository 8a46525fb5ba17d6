"""Enhancement orchestrator: drives the active AI provider.

Owns the in-memory enhancement state (availability, catalogs, loading flags,
errors) and the persisted enhancement settings. Every state change happens in
coroutines on one event loop. Network work for a provider runs in keyed task
slots so a provider switch cancels whatever the previous provider still had
in flight.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from dictate_ai.config.schema import EndpointsConfig, EnhancementSettings, ProviderSelection
from dictate_ai.config.store import SettingsStore
from dictate_ai.exceptions import ProviderError
from dictate_ai.logging import get_logger
from dictate_ai.providers.base import ProgressCallback, ProviderClient
from dictate_ai.providers.registry import create_provider
from dictate_ai.providers.schema import (
    DEFAULT_ENHANCEMENT_PROMPT,
    DEFAULT_IMAGE_ANALYSIS_PROMPT,
    EnhancementOptions,
    ProviderKind,
    RemoteAIModel,
)
from dictate_ai.tasks import KeyedTaskRunner

_logger = get_logger("Orchestrator")

CONNECTION_OK = "Connection successful"
CONNECTION_FAILED = "Connection failed"

# Shorter input is returned as-is
MIN_ENHANCE_LENGTH = 5

# User turn for image analysis; the instructions travel as the system prompt
IMAGE_USER_PROMPT = "Analyze this screenshot."

VISION_KEYWORDS = ("gemini", "gemma", "llava", "vl", "vision", "minicpm", "moondream", "llama-4")

FLAGSHIP_TEXT_MODELS = {
    ProviderKind.OLLAMA: "gemma3",
    ProviderKind.LMSTUDIO: "gemma3",
    ProviderKind.GROQ: "llama-3.3-70b-versatile",
    ProviderKind.GEMINI: "models/gemini-2.0-flash",
}

FLAGSHIP_IMAGE_MODELS = {
    ProviderKind.OLLAMA: "gemma3",
    ProviderKind.LMSTUDIO: "gemma3",
    ProviderKind.GROQ: "meta-llama/llama-4-maverick-17b-128e-instruct",
    ProviderKind.GEMINI: "models/gemini-2.0-flash",
}

# Per-provider task slots, cancelled together on a provider switch
_PROVIDER_SLOTS = ("availability", "models", "image_models", "connection")


def is_vision_model(model: RemoteAIModel) -> bool:
    """True when the id or display name carries a known vision keyword."""
    haystack = f"{model.id} {model.display_name}".lower()
    return any(keyword in haystack for keyword in VISION_KEYWORDS)


def filter_vision_models(models: list[RemoteAIModel]) -> list[RemoteAIModel]:
    return [m for m in models if is_vision_model(m)]


def reconcile_selection(current: str, models: list[RemoteAIModel], flagship: str) -> str:
    """Pick the model id to keep selected after a catalog fetch.

    A selection present in the catalog is kept. Otherwise the flagship id is
    chosen on exact match, else the first entry. An empty catalog keeps the
    current selection.
    """
    ids = [m.id for m in models]
    if not ids or (current and current in ids):
        return current
    return flagship if flagship in ids else ids[0]


@dataclass
class EnhancementState:
    """In-memory view of the active provider."""

    provider_available: bool = False
    text_models: list[RemoteAIModel] = field(default_factory=list)
    image_models: list[RemoteAIModel] = field(default_factory=list)
    is_loading_models: bool = False
    is_loading_image_models: bool = False
    error_message: str | None = None
    image_error_message: str | None = None
    is_testing_connection: bool = False
    connection_status: str | None = None


class EnhancementOrchestrator:
    """State machine for the AI enhancement feature."""

    def __init__(
        self,
        store: SettingsStore,
        endpoints: EndpointsConfig | None = None,
        provider_factory: Callable[[ProviderKind], ProviderClient] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Settings store holding the persisted enhancement record.
            endpoints: Provider base URLs. Defaults are used when omitted.
            provider_factory: Builds a client for a provider kind. Defaults to
                create_provider() against ``endpoints``.
        """
        self._store = store
        self._endpoints = endpoints or EndpointsConfig()
        self._factory = provider_factory or (lambda kind: create_provider(kind, self._endpoints))
        self._providers: dict[ProviderKind, ProviderClient] = {}
        self._runner = KeyedTaskRunner()
        self.state = EnhancementState()

    @property
    def settings(self) -> EnhancementSettings:
        return self._store.settings.enhancement

    @property
    def active_provider(self) -> ProviderKind:
        return self.settings.active_provider

    def provider(self, kind: ProviderKind | None = None) -> ProviderClient:
        """Return the (cached) client for ``kind``, defaulting to the active one."""
        kind = kind or self.active_provider
        if kind not in self._providers:
            self._providers[kind] = self._factory(kind)
        return self._providers[kind]

    async def aclose(self) -> None:
        self._runner.cancel_all()
        for client in self._providers.values():
            await client.aclose()
        self._providers.clear()

    def _save(self) -> None:
        self._store.save()

    def _credential(self, kind: ProviderKind) -> str | None:
        return self.settings.credential_for(kind)

    def _slot(self, kind: ProviderKind, name: str) -> str:
        return f"{kind.value}.{name}"

    def _scoped_error(self, kind: ProviderKind, message: str) -> str:
        return f"{kind.display_name}: {message}"

    # -- Intents ------------------------------------------------------------

    async def activate(self) -> None:
        """Check the active provider and load its catalogs when usable."""
        kind = self.active_provider
        _logger.info("Activating provider {}", kind.value)

        if kind.is_local:
            available = await self._runner.run(
                self._slot(kind, "availability"), self._check_availability(kind)
            )
            if available and kind is self.active_provider:
                await self._load_all()
            return

        if not self._credential(kind):
            _logger.debug("{} has no API key, skipping catalog load", kind.value)
            self.state.provider_available = False
            return
        await asyncio.gather(
            self._runner.run(self._slot(kind, "availability"), self._check_availability(kind)),
            self._load_all(),
        )

    async def _check_availability(self, kind: ProviderKind) -> bool:
        available = await self.provider(kind).is_available(self._credential(kind))
        if kind is not self.active_provider:
            _logger.debug("Dropping availability result for inactive provider {}", kind.value)
            return False

        self.state.provider_available = available
        if not available and kind.is_local:
            client = self.provider(kind)
            self.state.error_message = self._scoped_error(
                kind, f"Not reachable at {client.base_url}. Make sure it is running."
            )
            _logger.warning("{} is not available", kind.value)
        return available

    async def _load_all(self) -> None:
        await asyncio.gather(self.load_models(), self.load_image_models())

    async def set_enabled(self, enabled: bool) -> None:
        self.settings.enabled = enabled
        self._save()
        _logger.info("AI enhancement {}", "enabled" if enabled else "disabled")
        if enabled:
            await self.activate()

    async def set_provider(self, kind: ProviderKind) -> None:
        """Switch the active provider and start over with the new one."""
        previous = self.active_provider
        for slot in _PROVIDER_SLOTS:
            self._runner.cancel(self._slot(previous, slot))

        if kind is not previous:
            self._swap_selection(previous, kind)
        self.settings.active_provider = kind
        self._save()
        self.state.error_message = None
        self.state.image_error_message = None
        self.state.connection_status = None
        self.state.is_loading_models = False
        self.state.is_loading_image_models = False
        self.state.is_testing_connection = False
        self.state.provider_available = False
        _logger.info("Switched provider {} -> {}", previous.value, kind.value)
        await self.activate()

    def _swap_selection(self, previous: ProviderKind, kind: ProviderKind) -> None:
        settings = self.settings
        settings.provider_selections[previous] = ProviderSelection(
            text_model=settings.selected_text_model,
            image_model=settings.selected_image_model,
        )
        remembered = settings.provider_selections.pop(kind, None)
        if remembered is not None:
            settings.selected_text_model = remembered.text_model
            settings.selected_image_model = remembered.image_model

    def set_credential(self, kind: ProviderKind, value: str) -> None:
        """Store an API key. No network traffic."""
        if kind.is_local:
            _logger.debug("Ignoring API key for local provider {}", kind.value)
            return
        if value:
            self.settings.credentials[kind] = value
        else:
            self.settings.credentials.pop(kind, None)
        self._save()
        _logger.info("Updated API key for {}", kind.value)

    async def load_models(self) -> None:
        kind = self.active_provider
        await self._runner.run(self._slot(kind, "models"), self._load_text_models(kind))

    async def _load_text_models(self, kind: ProviderKind) -> None:
        self.state.is_loading_models = True
        self.state.error_message = None
        try:
            models = await self.provider(kind).fetch_models(self._credential(kind))
        except ProviderError as e:
            if kind is self.active_provider:
                self.state.is_loading_models = False
                self.state.error_message = self._scoped_error(kind, str(e))
            _logger.warning("Loading models for {} failed: {}", kind.value, e)
            return

        if kind is not self.active_provider:
            _logger.debug("Dropping catalog for inactive provider {}", kind.value)
            return
        self.state.is_loading_models = False
        self.state.text_models = models
        selected = reconcile_selection(
            self.settings.selected_text_model, models, FLAGSHIP_TEXT_MODELS[kind]
        )
        if selected != self.settings.selected_text_model:
            _logger.info("Text model {} -> {}", self.settings.selected_text_model, selected)
            self.settings.selected_text_model = selected
            self._save()

    async def load_image_models(self) -> None:
        kind = self.active_provider
        await self._runner.run(self._slot(kind, "image_models"), self._load_image_models(kind))

    async def _load_image_models(self, kind: ProviderKind) -> None:
        self.state.is_loading_image_models = True
        self.state.image_error_message = None
        try:
            catalog = await self.provider(kind).fetch_models(self._credential(kind))
        except ProviderError as e:
            if kind is self.active_provider:
                self.state.is_loading_image_models = False
                self.state.image_error_message = self._scoped_error(kind, str(e))
            _logger.warning("Loading image models for {} failed: {}", kind.value, e)
            return

        if kind is not self.active_provider:
            _logger.debug("Dropping image catalog for inactive provider {}", kind.value)
            return
        models = filter_vision_models(catalog)
        self.state.is_loading_image_models = False
        self.state.image_models = models
        selected = reconcile_selection(
            self.settings.selected_image_model, models, FLAGSHIP_IMAGE_MODELS[kind]
        )
        if selected != self.settings.selected_image_model:
            _logger.info("Image model {} -> {}", self.settings.selected_image_model, selected)
            self.settings.selected_image_model = selected
            self._save()

    async def test_connection(self) -> bool:
        kind = self.active_provider
        connected = await self._runner.run(self._slot(kind, "connection"), self._test(kind))
        if connected and not kind.is_local and kind is self.active_provider:
            await self._load_all()
        return bool(connected)

    async def _test(self, kind: ProviderKind) -> bool:
        self.state.is_testing_connection = True
        self.state.connection_status = None
        connected = await self.provider(kind).test_connection(self._credential(kind))
        if kind is self.active_provider:
            self.state.is_testing_connection = False
            self.state.connection_status = CONNECTION_OK if connected else CONNECTION_FAILED
        _logger.info("Connection test for {}: {}", kind.value, connected)
        return connected

    def select_text_model(self, model_id: str) -> None:
        self.settings.selected_text_model = model_id
        self._save()

    def select_image_model(self, model_id: str) -> None:
        self.settings.selected_image_model = model_id
        self._save()

    def reset_prompt(self) -> None:
        self.settings.prompt = DEFAULT_ENHANCEMENT_PROMPT
        self._save()

    def reset_image_prompt(self) -> None:
        self.settings.image_prompt = DEFAULT_IMAGE_ANALYSIS_PROMPT
        self._save()

    def set_temperature(self, value: float) -> None:
        self.settings.temperature = max(0.0, min(1.0, value))
        self._save()

    # -- Work ---------------------------------------------------------------

    def enhancement_options(self, context: str | None = None) -> EnhancementOptions:
        return EnhancementOptions(
            system_prompt=self.settings.prompt,
            context=context,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
        )

    async def enhance(
        self,
        text: str,
        context: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Enhance ``text`` with the active provider and selected text model.

        Raises:
            ProviderError: Any provider failure, unchanged.
        """
        if len(text) <= MIN_ENHANCE_LENGTH:
            _logger.debug("Text too short to enhance ({} chars)", len(text))
            return text

        kind = self.active_provider
        _logger.info("Enhancing {} chars with {} / {}", len(text), kind.value, self.settings.selected_text_model)
        result = await self.provider(kind).enhance(
            text,
            self.settings.selected_text_model,
            self.enhancement_options(context),
            credential=self._credential(kind),
            on_progress=on_progress,
        )
        return result or text

    async def analyze_image(
        self,
        image: bytes,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Describe ``image`` with the selected image model and image prompt."""
        kind = self.active_provider
        _logger.info("Analyzing image with {} / {}", kind.value, self.settings.selected_image_model)
        return await self.provider(kind).analyze_image(
            image,
            self.settings.selected_image_model,
            IMAGE_USER_PROMPT,
            self.settings.image_prompt,
            credential=self._credential(kind),
            on_progress=on_progress,
        )
