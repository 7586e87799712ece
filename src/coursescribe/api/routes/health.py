"""Liveness endpoint reporting service configuration."""

from fastapi import APIRouter, Depends

from coursescribe import __version__
from coursescribe.api.deps import get_job_manager, get_settings
from coursescribe.config import Settings
from coursescribe.jobs.manager import JobManager
from coursescribe.models.base import CamelModel

router = APIRouter(tags=["health"])


class HealthResponse(CamelModel):
    status: str
    version: str
    processing_mode: str
    text_provider: str
    credentials_configured: bool
    jobs: int


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health_check(
    mgr: JobManager = Depends(get_job_manager),
    cfg: Settings = Depends(get_settings),
) -> HealthResponse:
    """Report liveness. Missing model keys do not make the service unhealthy."""
    if cfg.text_provider == "claude":
        configured = bool(cfg.gemini_api_key and cfg.anthropic_api_key)
    else:
        configured = bool(cfg.gemini_api_key)

    return HealthResponse(
        status="healthy",
        version=__version__,
        processing_mode=cfg.processing_mode,
        text_provider=cfg.text_provider,
        credentials_configured=configured,
        jobs=len(mgr.list_jobs()),
    )
