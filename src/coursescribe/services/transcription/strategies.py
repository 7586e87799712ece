"""Concrete transcription tiers, in fallback order."""

from __future__ import annotations

import logging

from coursescribe.models.job import TranscriptSource
from coursescribe.services.prompts import (
    build_context_fallback_prompt,
    build_multimodal_prompt,
    render_canned_transcript,
)
from coursescribe.services.providers.base import FailureKind, IModelProvider
from coursescribe.services.transcription.base import (
    TierOutcome,
    TranscriptionContext,
    TranscriptionStrategy,
)

logger = logging.getLogger(__name__)


class MultimodalTranscriptionStrategy(TranscriptionStrategy):
    """Tier 1: send the uploaded media to a multimodal model."""

    def __init__(self, provider: IModelProvider, timeout: float | None = None) -> None:
        self._provider = provider
        self.timeout = timeout

    @property
    def tier(self) -> TranscriptSource:
        return TranscriptSource.MULTIMODAL

    @property
    def display_name(self) -> str:
        return "multimodal transcription"

    @property
    def success_message(self) -> str:
        return (
            f"Video transcribed and analyzed from the uploaded media "
            f"({self._provider.name} multimodal)"
        )

    async def attempt(self, context: TranscriptionContext) -> TierOutcome:
        if not self._provider.supports_media:
            return TierOutcome.failure(
                self.tier,
                f"{self._provider.name} does not accept media input",
                FailureKind.UNSUPPORTED,
            )

        prompt = build_multimodal_prompt(context.metadata)
        logger.info(
            "Sending %d bytes (%s) to %s for transcription",
            len(context.media),
            context.mime_type,
            self._provider.name,
        )
        result = await self._provider.generate_from_media(
            prompt, context.media, context.mime_type
        )
        if not result.ok:
            return TierOutcome.failure(self.tier, result.error or "unknown error", result.failure_kind)
        return TierOutcome.success(self.tier, result.text.strip())


class ContextFallbackStrategy(TranscriptionStrategy):
    """Tier 2: synthesize a plausible lecture transcript from title and course."""

    def __init__(self, provider: IModelProvider, timeout: float | None = None) -> None:
        self._provider = provider
        self.timeout = timeout

    @property
    def tier(self) -> TranscriptSource:
        return TranscriptSource.CONTEXT_FALLBACK

    @property
    def display_name(self) -> str:
        return "context-based transcript"

    @property
    def success_message(self) -> str:
        return "Video transcribed from context (multimedia processing unavailable)"

    async def attempt(self, context: TranscriptionContext) -> TierOutcome:
        prompt = build_context_fallback_prompt(context.metadata)
        result = await self._provider.generate_text(prompt)
        if not result.ok:
            return TierOutcome.failure(self.tier, result.error or "unknown error", result.failure_kind)
        return TierOutcome.success(self.tier, result.text.strip())


class CannedTranscriptStrategy(TranscriptionStrategy):
    """Tier 3: static lecture script. Always succeeds."""

    @property
    def tier(self) -> TranscriptSource:
        return TranscriptSource.CANNED_DEFAULT

    @property
    def display_name(self) -> str:
        return "default transcript"

    @property
    def success_message(self) -> str:
        return "Video transcribed with the default transcript (temporary processing limitations)"

    async def attempt(self, context: TranscriptionContext) -> TierOutcome:
        return TierOutcome.success(self.tier, render_canned_transcript(context.metadata))
