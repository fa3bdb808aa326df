"""Error Handlers — global exception handlers for the LinkCard API.

Invariants:
    - LinkCardError → structured JSON with error code, message, severity
    - RateLimitExceededError additionally sets the Retry-After header
    - An error carrying a cookie directive sends it as Set-Cookie
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (LinkCardError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py to keep the entry point import fan-out small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from linkcard.core.errors import ErrorSeverity, LinkCardError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_linkcard_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_linkcard_error_handler(app: FastAPI) -> None:

    @app.exception_handler(LinkCardError)
    async def linkcard_error_handler(request: Request, exc: LinkCardError):
        """Handle all LinkCard domain errors."""
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"LinkCardError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "client_id": exc.context.client_id,
            },
        )
        headers = {}
        if exc.context.retry_after_seconds is not None:
            headers["Retry-After"] = str(exc.context.retry_after_seconds)
        if exc.context.set_cookie:
            headers["Set-Cookie"] = exc.context.set_cookie
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_response(),
            headers=headers,
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "validation_error",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.WARNING.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
