"""CourseScribe - course video transcription and enrichment."""

__version__ = "0.1.0"
