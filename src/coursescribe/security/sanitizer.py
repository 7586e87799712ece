"""Sanitization of user-supplied free text before it reaches a prompt."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from coursescribe.security.patterns import SecurityConfig, get_security_config

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

_STRIP_CHARS = re.compile(r"[<>{}\[\]\\\"'`]")
_LINE_BREAKS = re.compile(r"[\r\n]")
_WHITESPACE = re.compile(r"\s+")
_MARKDOWN_CHARS = re.compile(r"[|#*]")


@dataclass(frozen=True)
class SanitizedMetadata:
    """Title and course name that are safe to place in a prompt."""

    title: str
    course_name: str


def sanitize_text(
    text: Any,
    max_length: int = 100,
    fallback: str | None = None,
    config: SecurityConfig | None = None,
) -> str:
    """Neutralize free text so it can be substituted into a prompt template.

    Input that matches a dangerous pattern is discarded outright and replaced
    by ``fallback`` (the configured fallback title when not given). Otherwise
    bracket, quote and markdown characters are removed and whitespace is
    collapsed. If the cleaned text matches a pattern it is replaced by the
    generic placeholder. The result is truncated to ``max_length`` with an
    ellipsis appended when cut.

    Args:
        text: Raw user input. Non-strings are treated as empty.
        max_length: Maximum length before the ellipsis.
        fallback: Replacement for input detected as malicious.
        config: Security config; the process-wide one by default.

    Returns:
        Text that matches no dangerous pattern.
    """
    config = config or get_security_config()
    fallbacks = config.fallback_values

    if not text or not isinstance(text, str):
        return fallbacks.unspecified

    if fallback is None:
        fallback = fallbacks.title

    matched = config.find_dangerous_pattern(text)
    if matched:
        logger.warning("Dangerous pattern %r in user input, using fallback", matched)
        return fallback

    sanitized = _STRIP_CHARS.sub("", text)
    sanitized = _LINE_BREAKS.sub(" ", sanitized)
    sanitized = _WHITESPACE.sub(" ", sanitized)
    sanitized = _MARKDOWN_CHARS.sub("", sanitized).strip()

    matched = config.find_dangerous_pattern(sanitized)
    if matched:
        logger.warning("Pattern %r surfaced after normalization, using placeholder", matched)
        return fallbacks.generic_title

    if not sanitized:
        return fallbacks.unspecified

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + ELLIPSIS
        # A cut can complete a pattern that needed a word boundary.
        if config.contains_dangerous_patterns(sanitized):
            return fallbacks.generic_title

    return sanitized


def sanitize_metadata(
    title: Any,
    course_name: Any,
    config: SecurityConfig | None = None,
) -> SanitizedMetadata:
    """Sanitize the title and course name with their configured limits."""
    config = config or get_security_config()
    limits = config.limits
    fallbacks = config.fallback_values

    safe_title = sanitize_text(
        title, limits.max_title_length, fallbacks.title, config
    )
    safe_course = sanitize_text(
        course_name, limits.max_course_name_length, fallbacks.course_name, config
    )

    # Final gate; sanitize_text already guarantees this for its own output.
    if config.contains_dangerous_patterns(safe_title):
        safe_title = fallbacks.title
    if config.contains_dangerous_patterns(safe_course):
        safe_course = fallbacks.course_name

    return SanitizedMetadata(title=safe_title, course_name=safe_course)
