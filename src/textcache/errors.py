"""Error taxonomy for the text cache service.

Every failure the request pipeline can surface is a ``TextCacheError``
subclass carrying a stable ``code`` and the HTTP status it maps to.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: dict[str, Any] = {}


class TextCacheError(Exception):
    """Base exception for the text cache service."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class BadRequestError(TextCacheError):
    """Missing or oversized request input."""

    status_code = 400

    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__("BAD_REQUEST", message, details)


class InvalidOperationError(BadRequestError):
    """Requested operation has no prompt template."""

    def __init__(self, operation: str):
        super().__init__(f"Invalid operation: {operation}", {"operation": operation})
        self.code = "INVALID_OPERATION"


class RateLimitedError(TextCacheError):
    """Client identity exhausted its token bucket."""

    status_code = 429

    def __init__(self, message: str = "Too many requests, please retry later"):
        super().__init__("RATE_LIMITED", message)


class StorageError(TextCacheError):
    """Genuine fault in the cache storage backend (not a miss)."""

    status_code = 500

    def __init__(self, message: str = "Storage error", details: dict[str, Any] | None = None):
        super().__init__("STORAGE_ERROR", message, details)


class GenerationUnavailableError(TextCacheError):
    """Generative backend unreachable, failing, or timed out."""

    status_code = 503

    def __init__(
        self,
        message: str = "Generative backend unavailable",
        details: dict[str, Any] | None = None,
    ):
        super().__init__("GENERATION_UNAVAILABLE", message, details)


class EmptyGenerationError(TextCacheError):
    """Generative backend answered but produced no text."""

    status_code = 500

    def __init__(
        self,
        message: str = "Generative backend returned an empty result",
        details: dict[str, Any] | None = None,
    ):
        super().__init__("EMPTY_GENERATION", message, details)


class PromptConfigError(TextCacheError):
    """Prompt template does not match the arguments it is rendered with."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__("PROMPT_CONFIG_ERROR", message, details)
