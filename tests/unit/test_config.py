"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from coursescribe.config import Settings


class TestSettings:
    def test_default_timeouts_fit_pipeline(self) -> None:
        cfg = Settings()
        worst_case = 2 * cfg.tier_timeout_seconds + cfg.enrichment_timeout_seconds
        assert worst_case <= cfg.pipeline_timeout_seconds

    def test_rejects_timeouts_exceeding_pipeline(self) -> None:
        with pytest.raises(ValidationError, match="pipeline_timeout_seconds"):
            Settings(pipeline_timeout_seconds=10, tier_timeout_seconds=5, enrichment_timeout_seconds=1)

    def test_accepts_exact_fit(self) -> None:
        cfg = Settings(pipeline_timeout_seconds=11, tier_timeout_seconds=5, enrichment_timeout_seconds=1)
        assert cfg.pipeline_timeout_seconds == 11
