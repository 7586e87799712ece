"""Base interface and result type for model providers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class FailureKind(str, Enum):
    """Coarse classification of a failed model call."""

    CONFIGURATION = "configuration"
    AUTH = "auth"
    QUOTA = "quota"
    NETWORK = "network"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


def classify_exception(exc: BaseException) -> FailureKind:
    """Best-effort classification of an SDK exception by type and message."""
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return FailureKind.TIMEOUT
    if isinstance(exc, (ConnectionError, OSError)):
        return FailureKind.NETWORK

    message = str(exc).lower()
    if "api key" in message or "api_key" in message or "permission" in message or "401" in message:
        return FailureKind.AUTH
    if "quota" in message or "rate limit" in message or "resource_exhausted" in message or "429" in message:
        return FailureKind.QUOTA
    if "timeout" in message or "timed out" in message or "deadline" in message:
        return FailureKind.TIMEOUT
    if "network" in message or "connection" in message or "fetch" in message:
        return FailureKind.NETWORK
    return FailureKind.UNKNOWN


@dataclass(frozen=True)
class ModelResult:
    """Outcome of one model call: either text or a structured error."""

    ok: bool
    text: str = ""
    error: str | None = None
    failure_kind: FailureKind | None = None
    provider: str = ""
    model: str = ""
    usage: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(
        cls,
        text: str,
        provider: str,
        model: str,
        usage: dict[str, Any] | None = None,
    ) -> "ModelResult":
        return cls(ok=True, text=text, provider=provider, model=model, usage=usage or {})

    @classmethod
    def failure(
        cls,
        error: str,
        kind: FailureKind,
        provider: str,
        model: str = "",
    ) -> "ModelResult":
        return cls(ok=False, error=error, failure_kind=kind, provider=provider, model=model)

    @classmethod
    def from_exception(cls, exc: BaseException, provider: str, model: str = "") -> "ModelResult":
        return cls.failure(
            f"{type(exc).__name__}: {exc}", classify_exception(exc), provider, model
        )


class IModelProvider(Protocol):
    """Protocol for generative model backends.

    Implementations never raise for API problems; they return a failed
    ModelResult instead.
    """

    async def generate_text(self, prompt: str, model: str | None = None) -> ModelResult:
        """Generate text from a text-only prompt."""
        ...

    async def generate_from_media(
        self,
        prompt: str,
        data: bytes,
        mime_type: str,
        model: str | None = None,
    ) -> ModelResult:
        """Generate text from a prompt plus an inline media payload."""
        ...

    @property
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @property
    def is_available(self) -> bool:
        """Whether credentials are configured."""
        ...

    @property
    def supports_media(self) -> bool:
        """Whether ``generate_from_media`` can succeed."""
        ...
