"""Upload validation against configured type and size limits."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from coursescribe.config import Settings, settings

REASON_UNSUPPORTED_TYPE = "unsupported_type"
REASON_FILE_TOO_LARGE = "file_too_large"
REASON_EMPTY_FILE = "empty_file"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of upload validation.

    ``reason`` is a stable machine-readable code; ``error`` is the message
    shown to the client.
    """

    is_valid: bool
    reason: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def invalid(cls, reason: str, error: str) -> "ValidationResult":
        return cls(is_valid=False, reason=reason, error=error)


def validate_upload(
    mime_type: str | None,
    size: int,
    allowed_types: Iterable[str] | None = None,
    max_bytes: int | None = None,
) -> ValidationResult:
    """Check an uploaded file's type and size. First failing rule wins.

    Args:
        mime_type: Content type reported for the upload.
        size: Size in bytes.
        allowed_types: Allowed MIME types; ``settings.allowed_mime_types`` if None.
        max_bytes: Size limit; ``settings.max_upload_bytes`` if None.

    Returns:
        ValidationResult
    """
    allowed = list(allowed_types) if allowed_types is not None else settings.allowed_mime_types
    limit = max_bytes if max_bytes is not None else settings.max_upload_bytes

    if (mime_type or "").lower() not in {t.lower() for t in allowed}:
        return ValidationResult.invalid(
            REASON_UNSUPPORTED_TYPE,
            f"Unsupported file type '{mime_type}'. Allowed types: {', '.join(allowed)}",
        )

    if size > limit:
        return ValidationResult.invalid(
            REASON_FILE_TOO_LARGE,
            f"File is too large. Maximum size: {limit / (1024 * 1024):g}MB",
        )

    if size <= 0:
        return ValidationResult.invalid(REASON_EMPTY_FILE, "File is empty")

    return ValidationResult.ok()


class InputValidator:
    """Validator bound to a Settings instance."""

    def __init__(self, cfg: Settings | None = None) -> None:
        self._settings = cfg or settings

    def validate(self, mime_type: str | None, size: int) -> ValidationResult:
        return validate_upload(
            mime_type,
            size,
            allowed_types=self._settings.allowed_mime_types,
            max_bytes=self._settings.max_upload_bytes,
        )
