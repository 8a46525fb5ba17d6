"""Data models shared by the enhancement providers.

Defines provider identity, catalog entries and per-call enhancement options.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENHANCEMENT_PROMPT = """\
You are a professional editor improving transcribed text from speech-to-text.

Your task is to:
1. Fix grammar, punctuation, and capitalization
2. Correct obvious transcription errors and typos
3. Format the text to be more readable
4. Preserve all meaning and information from the original
5. Make the text flow naturally as written text
6. DO NOT add any new information that wasn't in the original
7. DO NOT remove any information from the original text

Focus only on improving readability while preserving the exact meaning."""

DEFAULT_IMAGE_ANALYSIS_PROMPT = """\
You are an AI assistant that analyzes screenshots to provide context for transcription.

Your task is to:
1. Describe what the user is currently working on based on the screenshot
2. Identify any visible text, UI elements, applications, or content that might be relevant
3. Respond in first person format (e.g., "I'm working on...")
4. Keep your response concise and focused on context that would help improve speech-to-text accuracy
5. If you see specific technical terms, names, or domain-specific vocabulary, mention them

Provide a brief, contextual summary that would help a transcription system better \
understand what the user might be talking about."""


class ProviderCategory(str, Enum):
    """Where a provider runs."""

    LOCAL = "local"
    REMOTE = "remote"


class ProviderKind(str, Enum):
    """AI enhancement backends supported by dictate-ai."""

    OLLAMA = "ollama"
    LMSTUDIO = "lmstudio"
    GROQ = "groq"
    GEMINI = "gemini"

    @property
    def category(self) -> ProviderCategory:
        """Local daemons need no credential, cloud APIs do."""
        if self in (ProviderKind.OLLAMA, ProviderKind.LMSTUDIO):
            return ProviderCategory.LOCAL
        return ProviderCategory.REMOTE

    @property
    def is_local(self) -> bool:
        return self.category is ProviderCategory.LOCAL

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DISPLAY_NAMES = {
    ProviderKind.OLLAMA: "Ollama (Local)",
    ProviderKind.LMSTUDIO: "LM Studio (Local)",
    ProviderKind.GROQ: "Groq (Remote)",
    ProviderKind.GEMINI: "Gemini (Remote)",
}

_DESCRIPTIONS = {
    ProviderKind.OLLAMA: "Run AI models locally using Ollama",
    ProviderKind.LMSTUDIO: "Run AI models locally using LM Studio",
    ProviderKind.GROQ: "Use Groq's fast inference API",
    ProviderKind.GEMINI: "Google Gemini Generative Language API",
}


class RemoteAIModel(BaseModel):
    """One entry of a provider's model catalog."""

    id: str = Field(description="Backend-defined model identifier")
    display_name: str = Field(description="Human readable name")
    owned_by: str = Field(default="Local", description="Publisher or owner")
    context_window_tokens: int = Field(default=8192, ge=0)
    max_completion_tokens: int = Field(default=4096, ge=0)
    active: bool = True


class EnhancementOptions(BaseModel):
    """Per-call options for text enhancement. Immutable."""

    model_config = ConfigDict(frozen=True)

    system_prompt: str = DEFAULT_ENHANCEMENT_PROMPT
    context: str | None = None
    temperature: float = 0.3
    max_tokens: int = 1000
