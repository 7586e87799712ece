"""Model providers and their wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from coursescribe.config import Settings, settings
from coursescribe.errors import ConfigurationError
from coursescribe.services.providers.base import (
    FailureKind,
    IModelProvider,
    ModelResult,
    classify_exception,
)
from coursescribe.services.providers.claude import ClaudeProvider
from coursescribe.services.providers.gemini import GeminiProvider, gemini_mime_type

logger = logging.getLogger(__name__)


@dataclass
class ModelProviders:
    """Providers used by the pipeline: one for media, one for text."""

    multimodal: IModelProvider
    text: IModelProvider

    def ensure_configured(self) -> None:
        """Raise ConfigurationError unless every provider has credentials."""
        missing = [
            p.name for p in {id(p): p for p in (self.multimodal, self.text)}.values()
            if not p.is_available
        ]
        if missing:
            raise ConfigurationError(
                f"Missing API credentials for model provider(s): {', '.join(missing)}. "
                "Set GOOGLE_GENERATIVE_AI_API_KEY (and ANTHROPIC_API_KEY when "
                "TEXT_PROVIDER=claude)."
            )


def build_providers(cfg: Settings | None = None) -> ModelProviders:
    """Create providers from settings."""
    cfg = cfg or settings
    gemini = GeminiProvider(
        api_key=cfg.gemini_api_key,
        text_model=cfg.text_model,
        multimodal_model=cfg.multimodal_model,
    )

    if cfg.text_provider == "claude":
        text: IModelProvider = ClaudeProvider(api_key=cfg.anthropic_api_key, model=cfg.claude_model)
    elif cfg.text_provider == "gemini":
        text = gemini
    else:
        raise ConfigurationError(
            f"Unknown text provider '{cfg.text_provider}'. Available: gemini, claude"
        )

    logger.info("Model providers: multimodal=%s, text=%s", gemini.name, text.name)
    return ModelProviders(multimodal=gemini, text=text)


__all__ = [
    "ClaudeProvider",
    "FailureKind",
    "GeminiProvider",
    "IModelProvider",
    "ModelProviders",
    "ModelResult",
    "build_providers",
    "classify_exception",
    "gemini_mime_type",
]
