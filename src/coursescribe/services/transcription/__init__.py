"""Tiered transcript acquisition."""

from coursescribe.services.transcription.base import (
    ProgressCallback,
    TierOutcome,
    TranscriptionContext,
    TranscriptionStrategy,
    TranscriptResult,
)
from coursescribe.services.transcription.service import TranscriptionOrchestrator
from coursescribe.services.transcription.strategies import (
    CannedTranscriptStrategy,
    ContextFallbackStrategy,
    MultimodalTranscriptionStrategy,
)

__all__ = [
    "CannedTranscriptStrategy",
    "ContextFallbackStrategy",
    "MultimodalTranscriptionStrategy",
    "ProgressCallback",
    "TierOutcome",
    "TranscriptResult",
    "TranscriptionContext",
    "TranscriptionOrchestrator",
    "TranscriptionStrategy",
]
