"""Custom exceptions for CourseScribe."""


class CourseScribeError(Exception):
    """Base exception for CourseScribe."""

    pass


class ConfigurationError(CourseScribeError):
    """Required configuration (e.g. a model API key) is missing."""

    pass


class TranscriptionError(CourseScribeError):
    """Transcription failed."""

    pass


class EnrichmentError(CourseScribeError):
    """Enrichment could not be attempted."""

    pass


class JobNotFoundError(CourseScribeError):
    """No job exists with the requested id."""

    pass


class JobStateError(CourseScribeError):
    """A write would violate the job lifecycle (terminal job, progress regression)."""

    pass
