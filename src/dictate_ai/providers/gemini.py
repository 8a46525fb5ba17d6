"""Google Gemini provider (Generative Language API)."""

from typing import Any

from pydantic import BaseModel

from dictate_ai.normalizer import GeminiResponse
from dictate_ai.providers.base import (
    IMAGE_TEMPERATURE,
    ProgressCallback,
    ProviderClient,
    clamp_temperature,
    detect_image_mime,
    encode_image,
    improve_prompt,
    report_progress,
)
from dictate_ai.providers.schema import EnhancementOptions, ProviderKind, RemoteAIModel

MODEL_PREFIX = "models/"


class _GeminiModel(BaseModel):
    name: str
    displayName: str | None = None
    inputTokenLimit: int | None = None
    outputTokenLimit: int | None = None


class _GeminiModels(BaseModel):
    models: list[_GeminiModel] = []


def strip_model_prefix(model_id: str) -> str:
    """Catalog ids look like ``models/gemini-2.0-flash``; URLs want the bare name."""
    return model_id.removeprefix(MODEL_PREFIX)


def _system_instruction(text: str) -> dict[str, Any]:
    return {"parts": [{"text": text}]}


class GeminiProvider(ProviderClient):
    """Talks to the Gemini API. The key travels as a ``key`` query parameter."""

    kind = ProviderKind.GEMINI

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        api_key = self._require_credential(credential)
        response = await self._send(
            "GET",
            f"{self.base_url}/models",
            params={"key": api_key},
            timeout=self.catalog_timeout,
        )
        catalog = self._decode_catalog(response, _GeminiModels)
        models = [
            RemoteAIModel(
                id=m.name,
                display_name=m.displayName or m.name,
                owned_by="Google",
                context_window_tokens=m.inputTokenLimit or 131072,
                max_completion_tokens=m.outputTokenLimit or 8192,
            )
            for m in catalog.models
        ]
        self._logger.info("Found {} models", len(models))
        return self._sorted(models)

    async def _generate(
        self,
        model_id: str,
        api_key: str,
        body: dict[str, Any],
        timeout: float,
        on_progress: ProgressCallback | None,
    ) -> str:
        url = f"{self.base_url}/models/{strip_model_prefix(model_id)}:generateContent"
        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST", url, json=body, params={"key": api_key}, timeout=timeout
        )
        return self._complete(response, GeminiResponse, on_progress)

    async def enhance(
        self,
        text: str,
        model_id: str,
        options: EnhancementOptions,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        api_key = self._require_credential(credential)
        self._require_model(model_id)
        report_progress(on_progress, 0.1)
        body = {
            "system_instruction": _system_instruction(options.system_prompt),
            "contents": [{"parts": [{"text": improve_prompt(text, options.context)}]}],
            "generationConfig": {
                "temperature": clamp_temperature(options.temperature),
                "maxOutputTokens": self.clamp_max_tokens(options.max_tokens),
            },
        }
        return await self._generate(model_id, api_key, body, self.enhance_timeout, on_progress)

    async def analyze_image(
        self,
        image: bytes,
        model_id: str,
        prompt: str,
        system_prompt: str,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        api_key = self._require_credential(credential)
        self._require_model(model_id)
        self._require_image(image)
        report_progress(on_progress, 0.1)
        parts = [
            {"inline_data": {"mime_type": detect_image_mime(image), "data": encode_image(image)}},
            {"text": prompt},
        ]
        body: dict[str, Any] = {
            "contents": [{"parts": parts}],
            "generationConfig": {"temperature": IMAGE_TEMPERATURE},
        }
        if system_prompt:
            body["system_instruction"] = _system_instruction(system_prompt)
        return await self._generate(model_id, api_key, body, self.image_timeout, on_progress)
