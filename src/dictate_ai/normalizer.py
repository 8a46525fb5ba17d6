"""Response normalization for enhancement providers.

Two responsibilities:
1. Layered decode: a strict pydantic schema first, then a forgiving JSON walk
   when the strict pass yields no text. Upstream APIs change response shapes
   without bumping versions.
2. Text cleanup: strip "thinking" scratchpad markup and surplus blank lines.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ValidationError

from dictate_ai.exceptions import EmptyResponseError
from dictate_ai.logging import get_logger

_logger = get_logger("Normalizer")

_THINKING_PATTERNS = [
    re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE),
    re.compile(r"<thinking>[\s\S]*?</thinking>", re.IGNORECASE),
    re.compile(r"\[thinking\][\s\S]*?\[/thinking\]", re.IGNORECASE),
    re.compile(r"\*thinking\*[\s\S]*?\*/thinking\*", re.IGNORECASE),
]
_EXCESS_NEWLINES = re.compile(r"\n\s*\n\s*\n")


def clean_thinking_tags(text: str) -> str:
    """Remove thinking annotations and collapse runs of blank lines.

    Removal repeats until nothing changes, so a tag that only forms after an
    inner tag is stripped is removed too. The result is a fixed point:
    cleaning it again returns it unchanged.

    Args:
        text: Raw model output.

    Returns:
        Text without thinking markup and with at most one blank line in a row.
    """
    cleaned = text
    while True:
        previous = cleaned
        for pattern in _THINKING_PATTERNS:
            cleaned = pattern.sub("", cleaned)
        cleaned = _EXCESS_NEWLINES.sub("\n\n", cleaned)
        if cleaned == previous:
            return cleaned


def normalize_output(text: str) -> str:
    """Clean thinking tags and trim surrounding whitespace."""
    return clean_thinking_tags(text).strip()


# --- Strict schemas ---------------------------------------------------------


class _GeminiPart(BaseModel):
    text: str | None = None


class _GeminiContent(BaseModel):
    parts: list[_GeminiPart] | None = None
    text: str | None = None


class _GeminiCandidate(BaseModel):
    content: _GeminiContent | None = None
    output: str | None = None


class CompletionSchema(BaseModel):
    """Strict response model that knows where its completion text lives."""

    def text(self) -> str | None:
        raise NotImplementedError


class GeminiResponse(CompletionSchema):
    """generateContent response."""

    candidates: list[_GeminiCandidate]

    def text(self) -> str | None:
        if not self.candidates:
            return None
        first = self.candidates[0]
        if first.content and first.content.parts:
            for part in first.content.parts:
                if part.text is not None:
                    return part.text
        if first.content and first.content.text:
            return first.content.text
        return first.output


class _ChatMessage(BaseModel):
    content: str | None = None


class _ChatChoice(BaseModel):
    message: _ChatMessage


class ChatCompletionResponse(CompletionSchema):
    """OpenAI-style chat completion response (LM Studio, Groq)."""

    choices: list[_ChatChoice]

    def text(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].message.content


class GenerateResponse(CompletionSchema):
    """Ollama /api/generate response."""

    response: str | None = None

    def text(self) -> str | None:
        return self.response


# --- Layered decode ---------------------------------------------------------


def _strict_text(raw: bytes, schema: type[CompletionSchema]) -> str | None:
    try:
        decoded = schema.model_validate_json(raw)
    except ValidationError as e:
        _logger.debug("Strict decode with {} failed: {}", schema.__name__, e.error_count())
        return None
    return decoded.text()


def _first_candidate(payload: dict[str, Any]) -> dict[str, Any] | None:
    for key in ("candidates", "choices"):
        entries = payload.get(key)
        if isinstance(entries, list) and entries and isinstance(entries[0], dict):
            return entries[0]
    return None


def _non_empty_str(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def fallback_extract_text(raw: bytes) -> str | None:
    """Pull the first text out of a response using an untyped JSON walk.

    Checks, in order: first candidate's content.parts[0].text, then
    content.text, then the legacy output field. For chat-shaped responses
    the choice's message plays the role of content.

    Returns:
        The text, or None when nothing usable is found.
    """
    try:
        payload = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None

    first = _first_candidate(payload)
    if first is not None:
        content = first.get("content")
        if not isinstance(content, dict):
            content = first.get("message")

        if isinstance(content, dict):
            parts = content.get("parts")
            if isinstance(parts, list) and parts and isinstance(parts[0], dict):
                text = _non_empty_str(parts[0].get("text"))
                if text:
                    return text

            text = _non_empty_str(content.get("text"))
            if text:
                return text

        text = _non_empty_str(first.get("output"))
        if text:
            return text

    return _non_empty_str(payload.get("output"))


def extract_text(raw: bytes, schema: type[CompletionSchema], provider: str) -> str:
    """Decode completion text using the strict schema, then the fallback walk.

    Args:
        raw: Response body bytes.
        schema: Provider-specific strict response model.
        provider: Provider display name for error reporting.

    Returns:
        The raw (uncleaned) completion text.

    Raises:
        EmptyResponseError: If both tiers yield no text.
    """
    text = _strict_text(raw, schema)
    if not text:
        _logger.debug("Strict decode yielded no text, trying fallback walk")
        text = fallback_extract_text(raw)
    if not text:
        _logger.warning("{} response contained no text", provider)
        raise EmptyResponseError(provider)
    return text
