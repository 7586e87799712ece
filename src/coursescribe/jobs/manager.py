"""Job manager: accepts uploads and runs the transcription pipeline."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from coursescribe.config import Settings, settings
from coursescribe.errors import ConfigurationError, JobStateError
from coursescribe.jobs.store import InMemoryJobStore, JobRepository
from coursescribe.models.job import Job, JobStatus, VideoMetadata
from coursescribe.security.sanitizer import sanitize_metadata
from coursescribe.services.enrichment import EnrichmentGenerator
from coursescribe.services.providers import ModelProviders, build_providers
from coursescribe.services.providers.base import FailureKind, classify_exception
from coursescribe.services.transcription import (
    TranscriptionContext,
    TranscriptionOrchestrator,
)

logger = logging.getLogger(__name__)


@dataclass
class UploadedMedia:
    """Raw upload held in memory while its job runs."""

    data: bytes
    file_name: str
    mime_type: str


def describe_failure(exc: BaseException, timeout: float | None = None) -> str:
    """Message stored on a failed job."""
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return f"Processing timed out after {timeout:g} seconds" if timeout else "Processing timed out"
    if isinstance(exc, ConfigurationError):
        return f"Configuration error: {exc}"

    kind = classify_exception(exc)
    if kind is FailureKind.AUTH:
        return "Authentication error: check the model API key"
    if kind is FailureKind.QUOTA:
        return "Model API quota limit reached. Try again later."
    if kind is FailureKind.NETWORK:
        return "Connection error while contacting the model API"
    return f"Processing error: {exc}"


class JobManager:
    """Creates transcription jobs and runs them with concurrency control.

    The job record is written before any model call, so an id handed to a
    client can always be polled. Background execution uses
    asyncio.create_task with a semaphore for concurrency limiting, and the
    whole pipeline is bounded by ``pipeline_timeout_seconds``.
    """

    def __init__(
        self,
        store: JobRepository | None = None,
        providers: ModelProviders | None = None,
        cfg: Settings | None = None,
    ) -> None:
        self._settings = cfg or settings
        if store is None:
            store = InMemoryJobStore(
                ttl_seconds=self._settings.job_ttl_seconds,
                max_jobs=self._settings.max_jobs,
            )
        self._store = store
        self._providers = providers
        self._semaphore = asyncio.Semaphore(self._settings.max_concurrent_jobs)
        self._tasks: set[asyncio.Task[Job]] = set()

    @property
    def store(self) -> JobRepository:
        return self._store

    def create_job(self, metadata: VideoMetadata) -> Job:
        """Record a new job in the processing state."""
        job = self._store.create(Job(video_metadata=metadata))
        logger.info(
            "Created job %s for '%s' (%s, %d bytes)",
            job.id,
            metadata.file_name,
            metadata.file_type,
            metadata.file_size,
        )
        return job

    def submit(self, media: UploadedMedia, metadata: VideoMetadata) -> Job:
        """Create a job and schedule its pipeline in the background.

        Returns:
            The created Job (status=processing).
        """
        job = self.create_job(metadata)
        task = asyncio.create_task(self.run_job(job.id, media))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return job

    async def process(self, media: UploadedMedia, metadata: VideoMetadata) -> Job:
        """Create a job and run its pipeline to completion."""
        job = self.create_job(metadata)
        return await self.run_job(job.id, media)

    def get_job(self, job_id: str) -> Job | None:
        """Get a job by ID."""
        return self._store.get(job_id)

    def list_jobs(self) -> list[Job]:
        """List all jobs, most recent first."""
        return self._store.list_jobs()

    async def run_job(self, job_id: str, media: UploadedMedia) -> Job:
        """Run the pipeline for a created job and return its final record."""
        timeout = self._settings.pipeline_timeout_seconds
        async with self._semaphore:
            try:
                await asyncio.wait_for(self._execute(job_id, media), timeout=timeout)
            except asyncio.TimeoutError as exc:
                logger.error("Job %s exceeded the %ss pipeline budget", job_id, timeout)
                self._fail(job_id, describe_failure(exc, timeout))
            except ConfigurationError as exc:
                logger.error("Job %s cannot run: %s", job_id, exc)
                self._fail(job_id, describe_failure(exc))
            except Exception as exc:
                logger.exception("Job %s failed", job_id)
                self._fail(job_id, describe_failure(exc))

        job = self._store.get(job_id)
        if job is None:
            raise JobStateError(f"Job {job_id} disappeared while processing")
        return job

    async def shutdown(self) -> None:
        """Cancel background jobs still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d running job(s)", len(tasks))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _get_providers(self) -> ModelProviders:
        if self._providers is None:
            self._providers = build_providers(self._settings)
        return self._providers

    async def _execute(self, job_id: str, media: UploadedMedia) -> None:
        job = self._store.get(job_id)
        if job is None:
            raise JobStateError(f"Job {job_id} not found")

        providers = self._get_providers()
        providers.ensure_configured()

        safe = sanitize_metadata(job.video_metadata.title, job.video_metadata.course_name)
        logger.info(
            "Job %s sanitized metadata: title=%r course=%r", job_id, safe.title, safe.course_name
        )

        def _checkpoint(progress: int, message: str) -> None:
            self._store.update(job_id, progress=progress, message=message)

        orchestrator = TranscriptionOrchestrator.from_providers(providers, self._settings)
        transcript = await orchestrator.transcribe(
            TranscriptionContext(media=media.data, mime_type=media.mime_type, metadata=safe),
            progress_callback=_checkpoint,
        )
        self._store.update(
            job_id,
            transcription_text=transcript.text,
            transcription_source=transcript.source,
            message=f"{transcript.message}; generating educational content",
        )
        if transcript.is_fallback:
            logger.warning(
                "Job %s continues with a %s transcript", job_id, transcript.source.value
            )

        enricher = EnrichmentGenerator(
            providers.text, timeout=self._settings.enrichment_timeout_seconds
        )
        enrichment = await enricher.enrich(transcript.text, safe)

        self._store.update(
            job_id,
            status=JobStatus.COMPLETED,
            progress=100,
            enriched_content=enrichment.content,
            analysis=enrichment.analysis,
            message=transcript.message,
        )
        logger.info(
            "Job %s completed (transcript: %s, enrichment: %s)",
            job_id,
            transcript.source.value,
            enrichment.source.value,
        )

    def _fail(self, job_id: str, message: str) -> None:
        try:
            self._store.update(
                job_id,
                status=JobStatus.FAILED,
                error_message=message,
                message="Failed",
            )
        except JobStateError:
            logger.warning("Job %s already finished; not marking it failed", job_id)
