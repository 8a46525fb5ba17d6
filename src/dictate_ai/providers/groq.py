"""Groq cloud provider (OpenAI-compatible API)."""

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

# Speech models share the catalog but cannot do chat completions
_EXCLUDED_ID_MARKERS = ("whisper", "tts")


class _GroqModel(BaseModel):
    id: str
    owned_by: str
    active: bool
    context_window: int
    max_completion_tokens: int


class _GroqModels(BaseModel):
    data: list[_GroqModel]


class GroqProvider(ProviderClient):
    """Talks to the Groq chat completions API with a bearer key."""

    kind = ProviderKind.GROQ

    @staticmethod
    def _headers(api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def fetch_models(self, credential: str | None = None) -> list[RemoteAIModel]:
        api_key = self._require_credential(credential)
        response = await self._send(
            "GET",
            f"{self.base_url}/models",
            headers=self._headers(api_key),
            timeout=self.catalog_timeout,
        )
        catalog = self._decode_catalog(response, _GroqModels)
        models = [
            RemoteAIModel(
                id=m.id,
                display_name=m.id,
                owned_by=m.owned_by,
                context_window_tokens=m.context_window,
                max_completion_tokens=m.max_completion_tokens,
                active=m.active,
            )
            for m in catalog.data
            if m.active and not any(marker in m.id for marker in _EXCLUDED_ID_MARKERS)
        ]
        self._logger.info("Found {} chat models", len(models))
        return self._sorted(models)

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
            "model": model_id,
            "messages": chat_messages(options.system_prompt, user_message(text, options.context)),
            "temperature": clamp_temperature(options.temperature),
            "max_completion_tokens": self.clamp_max_tokens(options.max_tokens),
            "stream": False,
        }

        report_progress(on_progress, 0.2)
        response = await self._send(
            "POST",
            f"{self.base_url}/chat/completions",
            json=body,
            headers=self._headers(api_key),
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
        api_key = self._require_credential(credential)
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
            f"{self.base_url}/chat/completions",
            json=body,
            headers=self._headers(api_key),
            timeout=self.image_timeout,
        )
        return self._complete(response, ChatCompletionResponse, on_progress)
