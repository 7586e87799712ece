"""Job domain models."""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from enum import Enum

from pydantic import ConfigDict, Field

from coursescribe.models.base import CamelModel
from coursescribe.models.enrichment import ContentAnalysis

_ID_ALPHABET = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_request_id() -> str:
    """Build a job id from the epoch milliseconds and a random base36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"transcribe_{int(time.time() * 1000)}_{suffix}"


class JobStatus(str, Enum):
    """Status of a transcription job."""

    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PROCESSING


class TranscriptSource(str, Enum):
    """Which fallback tier produced the transcript."""

    MULTIMODAL = "multimodal"
    CONTEXT_FALLBACK = "context_fallback"
    CANNED_DEFAULT = "canned_default"


class VideoMetadata(CamelModel):
    """Upload metadata, fixed at submission time."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    course_id: str
    course_name: str
    file_name: str
    file_size: int
    file_type: str
    duration: int | None = Field(None, description="Duration in seconds, if known")
    uploaded_at: datetime = Field(default_factory=utcnow)


class Job(CamelModel):
    """Lifecycle record of one accepted upload."""

    id: str = Field(default_factory=new_request_id)
    request_id: str = ""
    video_metadata: VideoMetadata
    status: JobStatus = JobStatus.PROCESSING
    progress: int = Field(10, ge=0, le=100)
    message: str = "Processing started"
    transcription_source: TranscriptSource | None = None
    transcription_text: str | None = None
    enriched_content: str | None = None
    analysis: ContentAnalysis | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def model_post_init(self, __context) -> None:
        if not self.request_id:
            self.request_id = self.id

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
