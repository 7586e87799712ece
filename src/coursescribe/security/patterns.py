"""Prompt-injection pattern configuration.

Patterns live in a JSON file (packaged default, or ``SECURITY_PATTERNS_PATH``)
so they can be updated without touching code. Individual pattern groups can
additionally be replaced through the ``PROMPT_INJECTION_PATTERNS`` environment
variable, which holds a JSON object keyed by group name.
"""

from __future__ import annotations

import json
import logging
import re
from functools import cached_property
from importlib import resources
from pathlib import Path

from pydantic import Field

from coursescribe.config import Settings, settings
from coursescribe.models.base import CamelModel

logger = logging.getLogger(__name__)

_DEFAULT_PATTERNS_RESOURCE = "security_patterns.json"


class PromptInjectionPatterns(CamelModel):
    """Regex signatures grouped by attack family."""

    direct_commands: list[str] = Field(default_factory=list)
    role_manipulation: list[str] = Field(default_factory=list)
    system_markers: list[str] = Field(default_factory=list)
    instruction_injection: list[str] = Field(default_factory=list)
    escape_patterns: list[str] = Field(default_factory=list)
    legacy_patterns: list[str] = Field(default_factory=list)

    def all_patterns(self) -> list[str]:
        return [
            *self.direct_commands,
            *self.role_manipulation,
            *self.system_markers,
            *self.instruction_injection,
            *self.escape_patterns,
            *self.legacy_patterns,
        ]


class FallbackValues(CamelModel):
    title: str = "Contenido educativo"
    course_name: str = "Curso general"
    generic_title: str = "Tema académico"
    generic_course: str = "Curso universitario"
    unspecified: str = "Contenido no especificado"


class SanitizationLimits(CamelModel):
    max_title_length: int = 100
    max_course_name_length: int = 80
    prompt_title_length: int = 100
    prompt_course_length: int = 80


class SecurityConfig(CamelModel):
    """Pattern signatures, safe fallback strings and length limits."""

    prompt_injection_patterns: PromptInjectionPatterns = Field(
        default_factory=PromptInjectionPatterns
    )
    fallback_values: FallbackValues = Field(default_factory=FallbackValues)
    limits: SanitizationLimits = Field(default_factory=SanitizationLimits)

    @cached_property
    def compiled_patterns(self) -> list[re.Pattern[str]]:
        compiled: list[re.Pattern[str]] = []
        for pattern in self.prompt_injection_patterns.all_patterns():
            try:
                compiled.append(re.compile(pattern, re.IGNORECASE))
            except re.error as exc:
                logger.warning("Skipping invalid security pattern %r: %s", pattern, exc)
        return compiled

    def find_dangerous_pattern(self, text: str) -> str | None:
        """Return the first matching signature in ``text``, if any."""
        if not text or not isinstance(text, str):
            return None
        for pattern in self.compiled_patterns:
            if pattern.search(text):
                return pattern.pattern
        return None

    def contains_dangerous_patterns(self, text: str) -> bool:
        return self.find_dangerous_pattern(text) is not None


def _read_config_text(path: Path | None) -> str:
    if path is not None:
        return Path(path).read_text(encoding="utf-8")
    return (
        resources.files("coursescribe.security")
        .joinpath("data", _DEFAULT_PATTERNS_RESOURCE)
        .read_text(encoding="utf-8")
    )


def load_security_config(
    path: Path | None = None,
    env_override: str | None = None,
) -> SecurityConfig:
    """Load the security configuration, applying the env override if valid.

    Args:
        path: Optional JSON file replacing the packaged defaults.
        env_override: Optional JSON object mapping group names
            (camelCase or snake_case) to pattern lists.

    Returns:
        Parsed SecurityConfig.
    """
    config = SecurityConfig.model_validate_json(_read_config_text(path))

    if not env_override:
        return config

    try:
        overrides = json.loads(env_override)
        if not isinstance(overrides, dict):
            raise ValueError("expected a JSON object")
        merged = config.prompt_injection_patterns.model_dump(by_alias=True)
        merged.update(
            PromptInjectionPatterns.model_validate(overrides).model_dump(
                by_alias=True, exclude_unset=True
            )
        )
    except ValueError as exc:
        # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
        logger.warning(
            "Ignoring invalid PROMPT_INJECTION_PATTERNS override, using defaults: %s",
            exc,
        )
        return config

    return SecurityConfig(
        prompt_injection_patterns=PromptInjectionPatterns.model_validate(merged),
        fallback_values=config.fallback_values,
        limits=config.limits,
    )


_security_config: SecurityConfig | None = None


def get_security_config(cfg: Settings | None = None) -> SecurityConfig:
    """Return the process-wide SecurityConfig, loading it on first use."""
    global _security_config
    if _security_config is None:
        cfg = cfg or settings
        _security_config = load_security_config(
            cfg.security_patterns_path, cfg.prompt_injection_patterns
        )
        logger.info(
            "Loaded %d prompt-injection patterns",
            len(_security_config.compiled_patterns),
        )
    return _security_config


def reset_security_config() -> None:
    """Drop the cached config so the next call reloads it."""
    global _security_config
    _security_config = None
