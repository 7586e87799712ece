"""Configuration management for CourseScribe."""

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_MIME_TYPES = [
    "video/mp4",
    "video/mpeg",
    "video/mov",
    "video/quicktime",
    "video/avi",
    "video/x-msvideo",
    "video/webm",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/ogg",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Model credentials
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key", "google_generative_ai_api_key"
        ),
    )
    anthropic_api_key: str | None = None

    # Models
    multimodal_model: str = "gemini-2.0-flash"
    text_model: str = "gemini-2.5-flash"
    text_provider: str = "gemini"  # "gemini" or "claude"
    claude_model: str = "claude-sonnet-4-20250514"

    # Upload limits
    max_upload_bytes: int = 100 * 1024 * 1024
    allowed_mime_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_MIME_TYPES)
    )

    # Prompt-injection patterns (None = packaged defaults)
    security_patterns_path: Path | None = None
    # JSON object overriding individual pattern groups
    prompt_injection_patterns: str | None = None

    # Pipeline
    processing_mode: str = "background"  # "background" or "inline"
    max_concurrent_jobs: int = 2
    pipeline_timeout_seconds: float = 300.0
    tier_timeout_seconds: float = 90.0
    enrichment_timeout_seconds: float = 60.0

    # Job retention
    job_ttl_seconds: int = 6 * 3600
    max_jobs: int = 1000

    @model_validator(mode="after")
    def _timeouts_fit_pipeline(self) -> "Settings":
        # Both model tiers and enrichment must finish inside the pipeline budget
        worst_case = 2 * self.tier_timeout_seconds + self.enrichment_timeout_seconds
        if worst_case > self.pipeline_timeout_seconds:
            raise ValueError(
                f"pipeline_timeout_seconds ({self.pipeline_timeout_seconds:g}) must cover two "
                f"transcription tiers plus enrichment ({worst_case:g})"
            )
        return self


# Global settings instance
settings = Settings()
