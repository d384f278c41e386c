"""Global exception handlers for consistent error responses.

Every error leaves the API in the same envelope:

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

Status mapping:
- ValidationAppError → 400
- RequestValidationError (malformed body or query) → 400
- RateLimitExceededError → 429, plus Retry-After / X-RateLimit-* headers
- LLMAppError, UpstreamServiceError → 502 (or details["http_status"])
- InvalidConfigurationError → 500 (server misconfiguration)
- anything else → 500 with a generic message
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import (
    AppError,
    InvalidConfigurationError,
    LLMAppError,
    RateLimitExceededError,
    UpstreamServiceError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, RateLimitExceededError):
        return 429
    if isinstance(exc, InvalidConfigurationError):
        return 500
    if isinstance(exc, (LLMAppError, UpstreamServiceError)):
        return int((exc.details or {}).get("http_status", 502))
    return 400


def _rate_limit_headers(exc: RateLimitExceededError) -> dict[str, str]:
    if not settings.app.rate_limit_include_headers:
        return {}

    details = exc.details or {}
    return {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(details.get("limit", 0)),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
        "X-RateLimit-Reset": str(details.get("reset_at", 0)),
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate a domain error into the JSON error envelope."""
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "path": request.url.path,
        },
    )

    error_content: dict = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = {k: v for k, v in exc.details.items() if k != "http_status"}

    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitExceededError) else {}

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and query strings in the error envelope."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]

    logger.info(
        "request_validation_failed",
        extra={"fields": fields, "path": request.url.path},
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "invalid_request",
                "message": "Request validation failed",
                "request_id": get_request_id(),
                "details": {"fields": fields},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; never leaks internals to the client."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on ``app`` (specific first, fallback last)."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
