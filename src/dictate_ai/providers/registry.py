"""Maps provider kinds to their client classes."""

from typing import TYPE_CHECKING

import httpx

from dictate_ai.providers.base import ProviderClient
from dictate_ai.providers.gemini import GeminiProvider
from dictate_ai.providers.groq import GroqProvider
from dictate_ai.providers.lmstudio import LMStudioProvider
from dictate_ai.providers.ollama import OllamaProvider
from dictate_ai.providers.schema import ProviderKind

if TYPE_CHECKING:
    from dictate_ai.config.schema import EndpointsConfig

PROVIDER_CLASSES: dict[ProviderKind, type[ProviderClient]] = {
    ProviderKind.OLLAMA: OllamaProvider,
    ProviderKind.LMSTUDIO: LMStudioProvider,
    ProviderKind.GROQ: GroqProvider,
    ProviderKind.GEMINI: GeminiProvider,
}


def _base_url(kind: ProviderKind, endpoints: "EndpointsConfig") -> str:
    return {
        ProviderKind.OLLAMA: endpoints.ollama_url,
        ProviderKind.LMSTUDIO: endpoints.lmstudio_url,
        ProviderKind.GROQ: endpoints.groq_url,
        ProviderKind.GEMINI: endpoints.gemini_url,
    }[kind]


def create_provider(
    kind: ProviderKind,
    endpoints: "EndpointsConfig",
    client: httpx.AsyncClient | None = None,
) -> ProviderClient:
    """Instantiate the client for ``kind`` against the configured endpoint."""
    return PROVIDER_CLASSES[kind](_base_url(kind, endpoints), client=client)
