"""FastAPI dependencies."""

from __future__ import annotations

from coursescribe.config import Settings, settings
from coursescribe.jobs.manager import JobManager

_job_manager: JobManager | None = None


def init_job_manager(manager: JobManager | None = None) -> JobManager:
    """Initialize the global JobManager (called at app startup)."""
    global _job_manager
    _job_manager = manager or JobManager()
    return _job_manager


def get_job_manager() -> JobManager:
    """Dependency that provides the JobManager instance."""
    if _job_manager is None:
        raise RuntimeError("JobManager not initialized; call init_job_manager() first")
    return _job_manager


def get_settings() -> Settings:
    """Dependency that provides the active settings."""
    return settings
