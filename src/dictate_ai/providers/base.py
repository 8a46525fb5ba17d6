"""Capability interface shared by every enhancement provider.

One base class, one subclass per backend. The base owns the HTTP plumbing
(timeouts, error mapping, catalog decoding, completion normalization) and a
default failure for the optional image-analysis capability.
"""

from __future__ import annotations

import base64
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from dictate_ai.exceptions import (
    BadStatusError,
    CapabilityUnsupportedError,
    DecodeFailureError,
    InvalidRequestError,
    MissingCredentialError,
    ProviderError,
    UnreachableError,
)
from dictate_ai.logging import get_logger
from dictate_ai.normalizer import CompletionSchema, extract_text, normalize_output
from dictate_ai.providers.schema import EnhancementOptions, ProviderKind, RemoteAIModel

ProgressCallback = Callable[[float], None]

_CatalogT = TypeVar("_CatalogT", bound=BaseModel)

PNG_MAGIC = b"\x89PNG"

# Temperature sent to any backend is kept inside this range
MIN_TEMPERATURE = 0.1
MAX_TEMPERATURE = 1.0

# Image analysis favours literal descriptions
IMAGE_TEMPERATURE = 0.2


def clamp_temperature(value: float) -> float:
    """Clamp a caller supplied temperature into [0.1, 1.0]."""
    return max(MIN_TEMPERATURE, min(MAX_TEMPERATURE, value))


def detect_image_mime(data: bytes) -> str:
    """Infer the MIME type from leading bytes: PNG magic, else JPEG."""
    return "image/png" if data.startswith(PNG_MAGIC) else "image/jpeg"


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def user_message(text: str, context: str | None) -> str:
    """Build the tagged user turn used by chat-style backends."""
    prefix = f"<CONTEXT>{context}</CONTEXT>\n\n" if context else ""
    return f"{prefix}<RAW_TRANSCRIPTION>{text}</RAW_TRANSCRIPTION>"


def improve_prompt(text: str, context: str | None, preamble: str = "") -> str:
    """Build the plain-text prompt used by non-chat backends."""
    prompt = preamble
    if context:
        prompt += f"\n\nCONTEXT:\n{context}"
    return prompt + f"\n\nTEXT TO IMPROVE:\n{text}"


def chat_messages(system_prompt: str, user_content: Any) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]


def image_content(prompt: str, image: bytes) -> list[dict[str, Any]]:
    """OpenAI-style multimodal user content: the prompt plus a data URI."""
    data_uri = f"data:{detect_image_mime(image)};base64,{encode_image(image)}"
    return [
        {"type": "text", "text": prompt},
        {"type": "image_url", "image_url": {"url": data_uri}},
    ]


def report_progress(on_progress: ProgressCallback | None, fraction: float) -> None:
    if on_progress is not None:
        on_progress(fraction)


class ProviderClient:
    """Base class for AI enhancement backends.

    Subclasses set ``kind`` and the endpoint/timeout class attributes, and
    implement fetch_models() and enhance(). Local providers also set
    ``health_path``; remote providers are checked with a catalog fetch.
    """

    kind: ProviderKind
    health_path: str = ""
    health_timeout: float = 5.0
    catalog_timeout: float = 10.0
    enhance_timeout: float = 30.0
    image_timeout: float = 60.0
    max_tokens_bounds: tuple[int, int] = (100, 8192)

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the provider.

        Args:
            base_url: Root URL of the backend API.
            client: Optional shared httpx client. One is created when omitted.
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._logger = get_logger(f"Providers.{self.kind.value}")

    @property
    def name(self) -> str:
        """Human readable provider name."""
        return self.kind.display_name

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    # -- Connectivity -------------------------------------------------------

    async def is_available(self, credential: str | None = None) -> bool:
        """Return True when the backend is reachable and usable.

        Local backends answer a cheap health check. Remote backends have no
        cheaper check than listing models, so a successful catalog fetch counts.
        """
        if self.kind.is_local:
            return await self._check_health()

        if not credential:
            self._logger.debug("No API key, reporting unavailable")
            return False
        try:
            await self.fetch_models(credential)
        except ProviderError as e:
            self._logger.info("Connection check failed: {}", e)
            return False
        return True

    async def test_connection(self, credential: str | None = None) -> bool:
        """Connectivity test; same check as is_available()."""
        return await self.is_available(credential)

    async def _check_health(self) -> bool:
        url = f"{self.base_url}{self.health_path}"
        self._logger.debug("Checking {}", url)
        try:
            response = await self._client.get(url, timeout=self.health_timeout)
        except httpx.RequestError as e:
            self._logger.info("Availability check failed: {} ({})", e, type(e).__name__)
            return False
        available = response.status_code == 200
        self._logger.debug("Availability check status={}", response.status_code)
        return available

    # -- Capabilities -------------------------------------------------------

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        """Return the backend's model catalog sorted by display name."""
        raise NotImplementedError

    async def enhance(
        self,
        text: str,
        model_id: str,
        options: EnhancementOptions,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Improve transcribed text and return the cleaned result."""
        raise NotImplementedError

    async def analyze_image(
        self,
        image: bytes,
        model_id: str,
        prompt: str,
        system_prompt: str,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Describe an image. Backends without vision support raise."""
        raise CapabilityUnsupportedError(self.name)

    # -- Helpers for subclasses --------------------------------------------

    def clamp_max_tokens(self, value: int) -> int:
        low, high = self.max_tokens_bounds
        return max(low, min(high, value))

    def _require_credential(self, credential: str | None) -> str:
        if not credential:
            raise MissingCredentialError(self.name)
        return credential

    def _require_model(self, model_id: str) -> None:
        if not model_id:
            raise InvalidRequestError(self.name, "No model selected")

    def _require_image(self, image: bytes) -> None:
        if not image:
            raise InvalidRequestError(self.name, "Empty image data")

    async def _send(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        **kwargs: Any,
    ) -> httpx.Response:
        """Perform a request, mapping transport failures and non-200 replies.

        Raises:
            UnreachableError: On connection failure or timeout.
            BadStatusError: On any status other than 200, carrying the body.
        """
        try:
            response = await self._client.request(method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            self._logger.warning("{} {} timed out after {}s", method, url, timeout)
            raise UnreachableError(self.name, f"{self.name} timed out after {timeout:.0f}s") from e
        except httpx.RequestError as e:
            self._logger.warning("{} {} failed: {}", method, url, type(e).__name__)
            raise UnreachableError(self.name, f"Cannot reach {self.name}: {e}") from e

        if response.status_code != 200:
            self._logger.warning("{} {} returned status {}", method, url, response.status_code)
            raise BadStatusError(self.name, response.status_code, response.text)
        return response

    def _decode_catalog(self, response: httpx.Response, schema: type[_CatalogT]) -> _CatalogT:
        try:
            return schema.model_validate_json(response.content)
        except ValidationError as e:
            self._logger.error("Could not parse model list: {}", e)
            raise DecodeFailureError(self.name, f"Failed to parse model list from {self.name}") from e

    def _complete(
        self,
        response: httpx.Response,
        schema: type[CompletionSchema],
        on_progress: ProgressCallback | None,
    ) -> str:
        """Extract, clean and report completion of a response body."""
        report_progress(on_progress, 0.8)
        text = normalize_output(extract_text(response.content, schema, self.name))
        report_progress(on_progress, 1.0)
        self._logger.debug("Completion produced {} chars", len(text))
        return text

    @staticmethod
    def _sorted(models: list[RemoteAIModel]) -> list[RemoteAIModel]:
        return sorted(models, key=lambda m: m.display_name)


__all__ = [
    "IMAGE_TEMPERATURE",
    "ProgressCallback",
    "ProviderClient",
    "chat_messages",
    "clamp_temperature",
    "detect_image_mime",
    "encode_image",
    "image_content",
    "improve_prompt",
    "report_progress",
    "user_message",
]
