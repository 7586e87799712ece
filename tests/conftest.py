"""Shared fixtures for CourseScribe tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from coursescribe.config import Settings
from coursescribe.models.job import VideoMetadata
from coursescribe.security.patterns import reset_security_config
from coursescribe.services.providers.base import FailureKind, ModelResult


class FakeProvider:
    """IModelProvider double with AsyncMock generate methods."""

    def __init__(
        self,
        name: str = "fake",
        text: str | ModelResult | Exception = "generated text",
        media: str | ModelResult | Exception = "media transcript",
        available: bool = True,
    ) -> None:
        self.name = name
        self.is_available = available
        self.supports_media = True
        self.generate_text = AsyncMock(**self._behaviour(text))
        self.generate_from_media = AsyncMock(**self._behaviour(media))

    def _behaviour(self, value: str | ModelResult | Exception) -> dict:
        if isinstance(value, Exception):
            return {"side_effect": value}
        if isinstance(value, str):
            value = ModelResult.success(value, self.name, "fake-model")
        return {"return_value": value}


def failed(error: str = "service unavailable", kind: FailureKind = FailureKind.NETWORK) -> ModelResult:
    return ModelResult.failure(error, kind, "fake", "fake-model")


@pytest.fixture(autouse=True)
def _fresh_security_config():
    reset_security_config()
    yield
    reset_security_config()


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def failed_result():
    return failed


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        gemini_api_key="test-key",
        anthropic_api_key=None,
        processing_mode="inline",
        security_patterns_path=None,
        prompt_injection_patterns=None,
        pipeline_timeout_seconds=5.0,
        tier_timeout_seconds=1.0,
        enrichment_timeout_seconds=1.0,
    )


@pytest.fixture
def video_metadata() -> VideoMetadata:
    return VideoMetadata(
        title="Intro",
        course_id="cs101",
        course_name="CS101",
        file_name="lecture.mp4",
        file_size=2 * 1024 * 1024,
        file_type="video/mp4",
    )
