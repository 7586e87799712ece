"""Job repository interface and in-memory implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Protocol

from coursescribe.errors import JobNotFoundError, JobStateError
from coursescribe.models.job import Job, JobStatus, utcnow

logger = logging.getLogger(__name__)


class JobRepository(Protocol):
    """Storage for job records.

    Writers are the job's own processing run; status readers must observe
    the latest written checkpoint.
    """

    def create(self, job: Job) -> Job:
        ...

    def get(self, job_id: str) -> Job | None:
        ...

    def update(self, job_id: str, **changes: Any) -> Job:
        ...

    def list_jobs(self) -> list[Job]:
        ...


class InMemoryJobStore:
    """Dict-backed job store.

    Each update builds a new Job snapshot and swaps it in with a single
    assignment, so readers never see a half-applied checkpoint. Terminal
    jobs are immutable and progress never moves backwards. Terminal jobs
    older than ``ttl_seconds`` are evicted, and once ``max_jobs`` records
    exist the oldest terminal jobs are dropped to make room.
    """

    def __init__(
        self,
        ttl_seconds: int | None = None,
        max_jobs: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._jobs: dict[str, Job] = {}
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._max_jobs = max_jobs
        self._clock = clock

    def __len__(self) -> int:
        return len(self._jobs)

    def create(self, job: Job) -> Job:
        if job.id in self._jobs:
            raise JobStateError(f"Job {job.id} already exists")
        self.evict_expired()
        self._make_room()
        self._jobs[job.id] = job
        return job

    def get(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def update(self, job_id: str, **changes: Any) -> Job:
        """Apply a checkpoint to a job.

        Raises:
            JobNotFoundError: Unknown id.
            JobStateError: The job is terminal or progress would decrease.
            ValueError: Progress outside 0-100.
        """
        current = self._jobs.get(job_id)
        if current is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        if current.is_terminal:
            raise JobStateError(
                f"Job {job_id} is {current.status.value}; terminal jobs cannot change"
            )

        if changes.get("status") == JobStatus.COMPLETED:
            changes.setdefault("progress", 100)

        progress = changes.get("progress", current.progress)
        if not 0 <= progress <= 100:
            raise ValueError(f"Progress must be within 0-100, got {progress}")
        if progress < current.progress:
            raise JobStateError(
                f"Progress of job {job_id} cannot decrease ({current.progress} -> {progress})"
            )

        updated = current.model_copy(update={**changes, "updated_at": self._clock()})
        self._jobs[job_id] = updated
        return updated

    def list_jobs(self) -> list[Job]:
        """List all jobs, most recent first."""
        return sorted(self._jobs.values(), key=lambda j: j.created_at, reverse=True)

    def evict_expired(self) -> int:
        """Drop terminal jobs whose last update is older than the TTL."""
        if self._ttl is None:
            return 0
        cutoff = self._clock() - self._ttl
        expired = [
            job_id for job_id, job in self._jobs.items()
            if job.is_terminal and job.updated_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info("Evicted %d expired job(s)", len(expired))
        return len(expired)

    def _make_room(self) -> None:
        if self._max_jobs is None or len(self._jobs) < self._max_jobs:
            return
        terminal = sorted(
            (job for job in self._jobs.values() if job.is_terminal),
            key=lambda j: j.updated_at,
        )
        overflow = len(self._jobs) - self._max_jobs + 1
        for job in terminal[:overflow]:
            del self._jobs[job.id]
        if len(self._jobs) >= self._max_jobs:
            logger.warning(
                "Job store holds %d jobs still processing (limit %d)",
                len(self._jobs),
                self._max_jobs,
            )
