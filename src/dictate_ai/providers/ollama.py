"""Ollama local daemon provider."""

from pydantic import BaseModel

from dictate_ai.normalizer import GenerateResponse
from dictate_ai.providers.base import (
    IMAGE_TEMPERATURE,
    ProgressCallback,
    ProviderClient,
    clamp_temperature,
    encode_image,
    improve_prompt,
    report_progress,
)
from dictate_ai.providers.schema import EnhancementOptions, ProviderKind, RemoteAIModel

OLLAMA_SYSTEM_PROMPT = "You are an AI that improves transcribed text while preserving meaning."


class _OllamaTag(BaseModel):
    name: str


class _OllamaTags(BaseModel):
    models: list[_OllamaTag] = []


class OllamaProvider(ProviderClient):
    """Talks to a local Ollama daemon over its native /api endpoints."""

    kind = ProviderKind.OLLAMA
    health_path = "/api/version"
    catalog_timeout = 5.0
    enhance_timeout = 60.0
    max_tokens_bounds = (100, 2000)

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        response = await self._send(
            "GET", f"{self.base_url}/api/tags", timeout=self.catalog_timeout
        )
        tags = self._decode_catalog(response, _OllamaTags)
        models = [RemoteAIModel(id=tag.name, display_name=tag.name) for tag in tags.models]
        self._logger.info("Found {} local models", len(models))
        return self._sorted(models)

    async def enhance(
        self,
        text: str,
        model_id: str,
        options: EnhancementOptions,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        self._require_model(model_id)
        prompt = improve_prompt(text, options.context, preamble=options.system_prompt)
        body = {
            "model": model_id,
            "prompt": f"{prompt}\n\nIMPROVED TEXT:",
            "system": OLLAMA_SYSTEM_PROMPT,
            "temperature": clamp_temperature(options.temperature),
            "max_tokens": self.clamp_max_tokens(options.max_tokens),
            "stream": False,
        }
        report_progress(on_progress, 0.1)

        self._logger.debug("Enhancing {} chars with {}", len(text), model_id)
        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST", f"{self.base_url}/api/generate", json=body, timeout=self.enhance_timeout
        )
        return self._complete(response, GenerateResponse, on_progress)

    async def analyze_image(
        self,
        image: bytes,
        model_id: str,
        prompt: str,
        system_prompt: str,
        credential: str | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        self._require_model(model_id)
        self._require_image(image)
        report_progress(on_progress, 0.1)
        body = {
            "model": model_id,
            "prompt": prompt,
            "images": [encode_image(image)],
            "temperature": IMAGE_TEMPERATURE,
            "stream": False,
        }
        if system_prompt:
            body["system"] = system_prompt

        self._logger.debug("Analyzing {} byte image with {}", len(image), model_id)
        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST", f"{self.base_url}/api/generate", json=body, timeout=self.image_timeout
        )
        return self._complete(response, GenerateResponse, on_progress)
