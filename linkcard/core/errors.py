"""Error Hierarchy — structured error values for the core, typed exceptions for the shell.

Invariants:
    - Core functions return ErrorDetail / FieldError values inside Err (never raise)
    - Every LinkCardError has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input errors (400-level) are recoverable; renderer failures are retryable
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Two layers: frozen dataclasses cross component boundaries, exceptions only
      exist in the API shell where FastAPI's global handler catches them
    - error_from_detail maps a core error code to its exception class in one place
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ─── Error Codes ─────────────────────────────────────────────────

REQUIRED = "required"
TOO_SHORT = "too_short"
TOO_LONG = "too_long"
INVALID_CHARACTERS = "invalid_characters"
INVALID_URL = "invalid_url"
INVALID_SCHEME = "invalid_scheme"
INVALID_HOST = "invalid_host"
INVALID_PATH = "invalid_path"
INVALID_CONTENT = "invalid_content"
INVALID_CONFIG = "invalid_config"
INVALID_STATE = "invalid_state"
VERSION_MISMATCH = "version_mismatch"
TOO_LARGE = "too_large"
GENERATION_FAILED = "generation_failed"
RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
BATCH_SIZE_EXCEEDED = "batch_size_exceeded"
NO_IDENTIFIER = "no_identifier"


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    STATE = "state"
    RATE_LIMIT = "rate_limit"
    EXTERNAL_RENDERER = "external_renderer"
    INTERNAL = "internal"


# ─── Error Values (core) ─────────────────────────────────────────

@dataclass(frozen=True)
class FieldError:
    """One field-addressable validation failure."""
    message: str
    code: str
    path: tuple[str | int, ...] = ()

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "code": self.code,
            "path": list(self.path),
        }


@dataclass(frozen=True)
class ErrorDetail:
    """Structured failure returned by core and service operations.

    `extra` carries code-specific data (retry_after, max_batch_size, size)
    that the shell copies into the response envelope.
    `set_cookie` is a directive the shell sends alongside the error (e.g. clearing
    a corrupt state cookie); it never appears in the body.
    """
    message: str
    code: str
    path: tuple[str | int, ...] = ()
    field_errors: tuple[FieldError, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)
    set_cookie: str | None = None

    @classmethod
    def from_field_errors(
        cls, errors: list[FieldError], code: str | None = None,
    ) -> "ErrorDetail":
        """Collapse a gate error list into one detail led by the first error."""
        first = errors[0]
        return cls(
            message=first.message,
            code=code or first.code,
            path=first.path,
            field_errors=tuple(errors),
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.path:
            data["path"] = list(self.path)
        data.update(self.extra)
        return data


# ─── Exceptions (shell) ──────────────────────────────────────────

@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    client_id: str | None = None
    path: tuple[str | int, ...] = ()
    field_errors: tuple[FieldError, ...] = ()
    retry_after_seconds: int | None = None
    max_batch_size: int | None = None
    set_cookie: str | None = None
    debug_info: dict[str, Any] | None = None


class LinkCardError(Exception):
    """Base exception for all API-surfaced failures."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.path:
            error["path"] = list(self.context.path)
        if self.context.field_errors:
            error["details"] = [e.to_dict() for e in self.context.field_errors]
        if self.context.retry_after_seconds is not None:
            error["retryAfter"] = self.context.retry_after_seconds
        if self.context.max_batch_size is not None:
            error["maxBatchSize"] = self.context.max_batch_size
        return {"error": error}


class InvalidInputError(LinkCardError):
    """User input or request payload failed the validation gate."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class StateTooLargeError(LinkCardError):
    """State still exceeds the byte ceiling after sanitization."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, TOO_LARGE, ErrorCategory.STATE,
            ErrorSeverity.ERROR, context, 413,
        )


class GenerationFailedError(LinkCardError):
    """External renderer failed — retryable, never cached."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, GENERATION_FAILED, ErrorCategory.EXTERNAL_RENDERER,
            ErrorSeverity.ERROR, context, 502,
        )


class RateLimitExceededError(LinkCardError):
    """Client exhausted its fixed-window budget."""
    def __init__(self, retry_after_seconds: int = 60, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Rate limit exceeded", RATE_LIMIT_EXCEEDED, ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429,
        )


class BatchSizeExceededError(LinkCardError):
    """Batch rejected before consuming a rate-limit slot."""
    def __init__(self, max_batch_size: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.max_batch_size = max_batch_size
        super().__init__(
            f"Batch size exceeds maximum of {max_batch_size}",
            BATCH_SIZE_EXCEEDED, ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 413,
        )


def error_from_detail(detail: ErrorDetail, client_id: str | None = None) -> LinkCardError:
    """Map a core ErrorDetail to the exception the API shell raises."""
    context = ErrorContext(
        client_id=client_id, path=detail.path, field_errors=detail.field_errors,
        set_cookie=detail.set_cookie,
    )
    if detail.code == RATE_LIMIT_EXCEEDED:
        return RateLimitExceededError(detail.extra.get("retryAfter", 60), context)
    if detail.code == BATCH_SIZE_EXCEEDED:
        return BatchSizeExceededError(detail.extra["maxBatchSize"], context)
    if detail.code == TOO_LARGE:
        return StateTooLargeError(detail.message, context)
    if detail.code == GENERATION_FAILED:
        return GenerationFailedError(detail.message, context)
    return InvalidInputError(detail.message, detail.code, context)
