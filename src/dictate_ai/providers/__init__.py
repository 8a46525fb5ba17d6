"""AI enhancement providers: one capability interface, four backends."""

from dictate_ai.providers.base import ProgressCallback, ProviderClient
from dictate_ai.providers.gemini import GeminiProvider
from dictate_ai.providers.groq import GroqProvider
from dictate_ai.providers.lmstudio import LMStudioProvider
from dictate_ai.providers.ollama import OllamaProvider
from dictate_ai.providers.registry import PROVIDER_CLASSES, create_provider
from dictate_ai.providers.schema import (
    DEFAULT_ENHANCEMENT_PROMPT,
    DEFAULT_IMAGE_ANALYSIS_PROMPT,
    EnhancementOptions,
    ProviderCategory,
    ProviderKind,
    RemoteAIModel,
)

__all__ = [
    "DEFAULT_ENHANCEMENT_PROMPT",
    "DEFAULT_IMAGE_ANALYSIS_PROMPT",
    "PROVIDER_CLASSES",
    "EnhancementOptions",
    "GeminiProvider",
    "GroqProvider",
    "LMStudioProvider",
    "OllamaProvider",
    "ProgressCallback",
    "ProviderCategory",
    "ProviderClient",
    "ProviderKind",
    "RemoteAIModel",
    "create_provider",
]
