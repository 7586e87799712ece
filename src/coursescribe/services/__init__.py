"""Services module for CourseScribe."""

from coursescribe.services.enrichment import EnrichmentGenerator
from coursescribe.services.transcription import TranscriptionOrchestrator
from coursescribe.services.validation import InputValidator, ValidationResult, validate_upload

__all__ = [
    "EnrichmentGenerator",
    "InputValidator",
    "TranscriptionOrchestrator",
    "ValidationResult",
    "validate_upload",
]
