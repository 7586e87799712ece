"""Gemini provider using the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types

from coursescribe.config import settings
from coursescribe.services.providers.base import FailureKind, ModelResult

logger = logging.getLogger(__name__)

# Upload MIME types mapped to the names Gemini accepts for inline data
_GEMINI_MIME_TYPES = {
    "video/mp4": "video/mp4",
    "video/mpeg": "video/mpeg",
    "video/mov": "video/mov",
    "video/quicktime": "video/mov",
    "video/avi": "video/x-msvideo",
    "video/x-msvideo": "video/x-msvideo",
    "video/webm": "video/webm",
    "audio/mpeg": "audio/mpeg",
    "audio/mp3": "audio/mpeg",
    "audio/wav": "audio/wav",
    "audio/ogg": "audio/ogg",
}


def gemini_mime_type(file_type: str) -> str:
    """Map an upload content type to the MIME type Gemini expects."""
    return _GEMINI_MIME_TYPES.get(file_type.lower(), file_type)


class GeminiProvider:
    """Model provider backed by Google Gemini.

    A missing API key marks the provider unavailable instead of failing at
    construction; every call then returns a configuration failure.
    """

    def __init__(
        self,
        api_key: str | None = None,
        text_model: str | None = None,
        multimodal_model: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the Gemini provider.

        Args:
            api_key: Gemini API key. Falls back to settings.
            text_model: Model for text-only generation.
            multimodal_model: Model for media transcription.
            client: Pre-built ``genai.Client`` (tests).
        """
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._text_model = text_model or settings.text_model
        self._multimodal_model = multimodal_model or settings.multimodal_model

        if client is not None:
            self._client = client
        elif self._api_key:
            self._client = genai.Client(api_key=self._api_key)
        else:
            self._client = None
            logger.warning("GeminiProvider: No API key found, provider unavailable")

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    @property
    def supports_media(self) -> bool:
        return True

    async def generate_text(self, prompt: str, model: str | None = None) -> ModelResult:
        model_name = model or self._text_model
        if self._client is None:
            return self._unconfigured(model_name)

        try:
            response = await self._client.aio.models.generate_content(
                model=model_name, contents=prompt
            )
        except Exception as exc:
            logger.warning("Gemini text generation failed (%s): %s", model_name, exc)
            return ModelResult.from_exception(exc, self.name, model_name)

        return self._to_result(response, model_name)

    async def generate_from_media(
        self,
        prompt: str,
        data: bytes,
        mime_type: str,
        model: str | None = None,
    ) -> ModelResult:
        """Send the media inline; the SDK base64-encodes the bytes on the wire."""
        model_name = model or self._multimodal_model
        if self._client is None:
            return self._unconfigured(model_name)

        try:
            media = types.Part.from_bytes(data=data, mime_type=gemini_mime_type(mime_type))
            response = await self._client.aio.models.generate_content(
                model=model_name, contents=[prompt, media]
            )
        except Exception as exc:
            logger.warning("Gemini multimodal generation failed (%s): %s", model_name, exc)
            return ModelResult.from_exception(exc, self.name, model_name)

        return self._to_result(response, model_name)

    def _unconfigured(self, model_name: str) -> ModelResult:
        return ModelResult.failure(
            "Gemini API key is not configured",
            FailureKind.CONFIGURATION,
            self.name,
            model_name,
        )

    def _to_result(self, response: Any, model_name: str) -> ModelResult:
        """Convert an SDK response into a ModelResult."""
        try:
            text = response.text
        except (AttributeError, ValueError) as exc:
            return ModelResult.failure(
                f"Unreadable Gemini response: {exc}", FailureKind.MALFORMED, self.name, model_name
            )

        if not text or not text.strip():
            return ModelResult.failure(
                "Gemini returned an empty response", FailureKind.MALFORMED, self.name, model_name
            )

        usage: dict[str, Any] = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None:
            usage = {
                "prompt_tokens": getattr(metadata, "prompt_token_count", None),
                "completion_tokens": getattr(metadata, "candidates_token_count", None),
                "total_tokens": getattr(metadata, "total_token_count", None),
            }

        logger.info("Gemini response from %s: %d chars", model_name, len(text))
        return ModelResult.success(text, self.name, model_name, usage)
