"""Job management for the CourseScribe API."""

from coursescribe.jobs.manager import JobManager, UploadedMedia
from coursescribe.jobs.store import InMemoryJobStore, JobRepository

__all__ = ["InMemoryJobStore", "JobManager", "JobRepository", "UploadedMedia"]
