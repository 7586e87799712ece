"""Main entry point for the CourseScribe service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from coursescribe.api.deps import init_job_manager
from coursescribe.api.routes import health, transcribe
from coursescribe.config import settings
from coursescribe.jobs.manager import JobManager


def create_app(job_manager: JobManager | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize resources on startup, clean up on shutdown."""
        manager = init_job_manager(job_manager)
        yield
        await manager.shutdown()

    app = FastAPI(
        title="CourseScribe",
        description="Course video transcription and educational enrichment",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Include API routes
    app.include_router(health.router)
    app.include_router(transcribe.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "coursescribe.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
