"""Claude provider for text-only generation."""

import logging
from typing import Any

import anthropic

from coursescribe.config import settings
from coursescribe.services.providers.base import FailureKind, ModelResult

logger = logging.getLogger(__name__)


class ClaudeProvider:
    """Model provider using the Anthropic Claude API.

    Claude does not take video or audio input, so it only serves text-only
    stages (context fallback and enrichment).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int = 8192,
        client: Any = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self._model = model or settings.claude_model
        self._max_tokens = max_tokens

        if client is not None:
            self._client = client
        elif self._api_key:
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        else:
            self._client = None
            logger.warning("ClaudeProvider: No API key found, provider unavailable")

    @property
    def name(self) -> str:
        return "claude"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    @property
    def supports_media(self) -> bool:
        return False

    async def generate_text(self, prompt: str, model: str | None = None) -> ModelResult:
        model_name = model or self._model
        if self._client is None:
            return ModelResult.failure(
                "Anthropic API key is not configured",
                FailureKind.CONFIGURATION,
                self.name,
                model_name,
            )

        try:
            response = await self._client.messages.create(
                model=model_name,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            logger.warning("Claude API error (%s): %s", model_name, exc)
            return ModelResult.from_exception(exc, self.name, model_name)

        raw_text = ""
        for block in response.content:
            if block.type == "text":
                raw_text += block.text

        if not raw_text.strip():
            return ModelResult.failure(
                "Claude returned an empty response", FailureKind.MALFORMED, self.name, model_name
            )

        usage = {
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
        }
        return ModelResult.success(raw_text, self.name, model_name, usage)

    async def generate_from_media(
        self,
        prompt: str,
        data: bytes,
        mime_type: str,
        model: str | None = None,
    ) -> ModelResult:
        return ModelResult.failure(
            f"Claude cannot transcribe media of type {mime_type}",
            FailureKind.UNSUPPORTED,
            self.name,
            model or self._model,
        )
