"""Request and response schemas for the CourseScribe API."""

from __future__ import annotations

from coursescribe.models.base import CamelModel
from coursescribe.models.job import Job, VideoMetadata


class SubmitResponse(CamelModel):
    success: bool = True
    request_id: str
    message: str
    video_metadata: VideoMetadata


class ErrorResponse(CamelModel):
    success: bool = False
    error: str


class JobListResponse(CamelModel):
    transcriptions: list[Job]


def dump(model: CamelModel) -> dict:
    """JSON-ready camelCase dict without unset optional fields."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
