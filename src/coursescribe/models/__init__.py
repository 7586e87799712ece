"""Data models for CourseScribe."""

from coursescribe.models.enrichment import (
    ContentAnalysis,
    EducationalStructure,
    EnrichmentResult,
    EnrichmentSource,
)
from coursescribe.models.job import (
    Job,
    JobStatus,
    TranscriptSource,
    VideoMetadata,
    new_request_id,
)

__all__ = [
    # Job
    "Job",
    "JobStatus",
    "TranscriptSource",
    "VideoMetadata",
    "new_request_id",
    # Enrichment
    "ContentAnalysis",
    "EducationalStructure",
    "EnrichmentResult",
    "EnrichmentSource",
]
