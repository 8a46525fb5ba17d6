"""LM Studio local server provider (REST API v0)."""

from pydantic import BaseModel

from dictate_ai.normalizer import ChatCompletionResponse
from dictate_ai.providers.base import (
    IMAGE_TEMPERATURE,
    ProgressCallback,
    ProviderClient,
    chat_messages,
    clamp_temperature,
    image_content,
    report_progress,
    user_message,
)
from dictate_ai.providers.schema import EnhancementOptions, ProviderKind, RemoteAIModel


class _LMStudioModel(BaseModel):
    id: str
    publisher: str | None = None
    max_context_length: int | None = None
    state: str | None = None


class _LMStudioModels(BaseModel):
    data: list[_LMStudioModel]


class LMStudioProvider(ProviderClient):
    """Talks to LM Studio's local REST server."""

    kind = ProviderKind.LMSTUDIO
    health_path = "/api/v0/models"

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        response = await self._send(
            "GET", f"{self.base_url}/api/v0/models", timeout=self.catalog_timeout
        )
        catalog = self._decode_catalog(response, _LMStudioModels)
        models = [
            RemoteAIModel(
                id=m.id,
                display_name=m.id,
                owned_by=m.publisher or "Local",
                context_window_tokens=m.max_context_length or 8192,
                active=m.state != "not-loaded",
            )
            for m in catalog.data
        ]
        self._logger.info("Found {} models ({} loaded)", len(models), sum(m.active for m in models))
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
        report_progress(on_progress, 0.1)
        body = {
            "model": model_id,
            "messages": chat_messages(options.system_prompt, user_message(text, options.context)),
            "temperature": clamp_temperature(options.temperature),
            "max_tokens": self.clamp_max_tokens(options.max_tokens),
            "stream": False,
        }

        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST",
            f"{self.base_url}/api/v0/chat/completions",
            json=body,
            timeout=self.enhance_timeout,
        )
        return self._complete(response, ChatCompletionResponse, on_progress)

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
            "messages": chat_messages(system_prompt, image_content(prompt, image)),
            "temperature": IMAGE_TEMPERATURE,
            "stream": False,
        }

        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST",
            f"{self.base_url}/api/v0/chat/completions",
            json=body,
            timeout=self.image_timeout,
        )
        return self._complete(response, ChatCompletionResponse, on_progress)
