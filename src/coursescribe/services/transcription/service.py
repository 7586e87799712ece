"""Tiered transcription orchestration."""

from __future__ import annotations

import asyncio
import logging

from coursescribe.config import Settings, settings
from coursescribe.errors import TranscriptionError
from coursescribe.services.providers import ModelProviders
from coursescribe.services.providers.base import FailureKind
from coursescribe.services.transcription.base import (
    ProgressCallback,
    TierOutcome,
    TranscriptionContext,
    TranscriptionStrategy,
    TranscriptResult,
)
from coursescribe.services.transcription.strategies import (
    CannedTranscriptStrategy,
    ContextFallbackStrategy,
    MultimodalTranscriptionStrategy,
)

logger = logging.getLogger(__name__)

# Checkpoints written while a transcript is being obtained
PROGRESS_PREPARING = 25
PROGRESS_FIRST_TIER = 50
PROGRESS_FALLBACK_TIER = 75
PROGRESS_TRANSCRIBED = 90


class TranscriptionOrchestrator:
    """Obtains a transcript by trying an ordered list of tiers.

    The first tier that succeeds wins and its identity is returned as the
    transcript's provenance. A failure, exception or timeout in a tier
    demotes to the next one; there are no retries within a tier.
    """

    def __init__(self, strategies: list[TranscriptionStrategy]) -> None:
        if not strategies:
            raise ValueError("At least one transcription strategy is required")
        self._strategies = list(strategies)

    @classmethod
    def from_providers(
        cls,
        providers: ModelProviders,
        cfg: Settings | None = None,
    ) -> "TranscriptionOrchestrator":
        """Standard order: multimodal, context fallback, canned default."""
        cfg = cfg or settings
        return cls([
            MultimodalTranscriptionStrategy(providers.multimodal, timeout=cfg.tier_timeout_seconds),
            ContextFallbackStrategy(providers.text, timeout=cfg.tier_timeout_seconds),
            CannedTranscriptStrategy(),
        ])

    @property
    def tiers(self) -> list[str]:
        """Tier names in the order they are attempted."""
        return [s.tier.value for s in self._strategies]

    async def transcribe(
        self,
        context: TranscriptionContext,
        progress_callback: ProgressCallback | None = None,
    ) -> TranscriptResult:
        """Run the tiers in order and return the first transcript obtained.

        Args:
            context: Media and sanitized metadata.
            progress_callback: Optional callback (progress 0-100, message).

        Returns:
            TranscriptResult with provenance and every attempt made.

        Raises:
            TranscriptionError: If every tier failed. Cannot happen while the
                last tier is the canned default.
        """
        attempts: list[TierOutcome] = []
        self._report_progress(progress_callback, PROGRESS_PREPARING, "Preparing media for transcription")

        for index, strategy in enumerate(self._strategies):
            if index == 0:
                self._report_progress(
                    progress_callback,
                    PROGRESS_FIRST_TIER,
                    f"Attempting {strategy.display_name}",
                )
            else:
                self._report_progress(
                    progress_callback,
                    PROGRESS_FALLBACK_TIER,
                    f"Falling back to {strategy.display_name}",
                )

            outcome = await self._run_strategy(strategy, context)
            attempts.append(outcome)

            if outcome.ok:
                logger.info(
                    "Transcript obtained via %s (%d chars)", outcome.tier.value, len(outcome.text)
                )
                self._report_progress(
                    progress_callback,
                    PROGRESS_TRANSCRIBED,
                    f"Transcript obtained via {strategy.display_name}",
                )
                return TranscriptResult(
                    text=outcome.text,
                    source=outcome.tier,
                    message=strategy.success_message,
                    attempts=attempts,
                )

            logger.warning(
                "Tier %s failed (%s): %s",
                outcome.tier.value,
                outcome.failure_kind.value if outcome.failure_kind else "unknown",
                outcome.error,
            )

        details = "; ".join(f"{a.tier.value}: {a.error}" for a in attempts)
        raise TranscriptionError(f"All transcription tiers failed. Details: {details}")

    async def _run_strategy(
        self,
        strategy: TranscriptionStrategy,
        context: TranscriptionContext,
    ) -> TierOutcome:
        """Run one tier under its timeout, turning errors into failures."""
        try:
            if strategy.timeout is not None:
                outcome = await asyncio.wait_for(strategy.attempt(context), timeout=strategy.timeout)
            else:
                outcome = await strategy.attempt(context)
        except asyncio.TimeoutError:
            return TierOutcome.failure(
                strategy.tier,
                f"{strategy.display_name} timed out after {strategy.timeout:g}s",
                FailureKind.TIMEOUT,
            )
        except Exception as exc:
            logger.exception("Tier %s raised", strategy.tier.value)
            return TierOutcome.failure(strategy.tier, f"{type(exc).__name__}: {exc}")

        if outcome.ok and not outcome.text.strip():
            return TierOutcome.failure(
                strategy.tier, "empty transcript", FailureKind.MALFORMED
            )
        return outcome

    def _report_progress(
        self,
        callback: ProgressCallback | None,
        progress: int,
        message: str,
    ) -> None:
        """Helper to safely report progress."""
        if callback:
            callback(min(max(progress, 0), 100), message)
