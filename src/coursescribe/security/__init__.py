"""Prompt-injection defenses for user-supplied metadata."""

from coursescribe.security.patterns import (
    SecurityConfig,
    get_security_config,
    load_security_config,
    reset_security_config,
)
from coursescribe.security.sanitizer import (
    SanitizedMetadata,
    sanitize_metadata,
    sanitize_text,
)

__all__ = [
    "SanitizedMetadata",
    "SecurityConfig",
    "get_security_config",
    "load_security_config",
    "reset_security_config",
    "sanitize_metadata",
    "sanitize_text",
]
