"""Base types for transcription tiers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field

from coursescribe.models.job import TranscriptSource
from coursescribe.security.sanitizer import SanitizedMetadata
from coursescribe.services.providers.base import FailureKind

ProgressCallback = Callable[[int, str], None]


@dataclass
class TranscriptionContext:
    """Inputs shared by every tier."""

    media: bytes
    mime_type: str
    metadata: SanitizedMetadata


@dataclass(frozen=True)
class TierOutcome:
    """Result of one tier attempt."""

    tier: TranscriptSource
    ok: bool
    text: str = ""
    error: str | None = None
    failure_kind: FailureKind | None = None

    @classmethod
    def success(cls, tier: TranscriptSource, text: str) -> "TierOutcome":
        return cls(tier=tier, ok=True, text=text)

    @classmethod
    def failure(
        cls,
        tier: TranscriptSource,
        error: str,
        kind: FailureKind | None = FailureKind.UNKNOWN,
    ) -> "TierOutcome":
        return cls(tier=tier, ok=False, error=error, failure_kind=kind)


@dataclass
class TranscriptResult:
    """Transcript plus the provenance of the tier that produced it."""

    text: str
    source: TranscriptSource
    message: str
    attempts: list[TierOutcome] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.source is not TranscriptSource.MULTIMODAL


class TranscriptionStrategy(ABC):
    """One fallback tier for obtaining a transcript.

    ``attempt`` reports failure through the returned TierOutcome. The
    orchestrator also treats any exception or timeout as a failure.
    """

    #: Per-attempt timeout in seconds, None for no limit
    timeout: float | None = None

    @property
    @abstractmethod
    def tier(self) -> TranscriptSource:
        """Tier identifier, recorded as the transcript's provenance."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for progress messages."""
        ...

    @property
    @abstractmethod
    def success_message(self) -> str:
        """Completion message telling callers where the transcript came from."""
        ...

    @abstractmethod
    async def attempt(self, context: TranscriptionContext) -> TierOutcome:
        """Try to produce a transcript."""
        ...
