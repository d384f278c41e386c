"""Request admission for FastAPI routes.

This module wires the admission limiter into the HTTP layer.

- One limiter per application, built by the app factory and kept on
  ``app.state.rate_limiter``; routes never touch module globals.
- Each route picks a named limit: ``generation`` for AI-backed endpoints,
  ``lookup`` for cheaper read-only ones. Both count against the same per-client
  request log.
- The client key is the first address in the forwarded-for header, or a
  shared sentinel when the header is missing.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Awaitable, Callable

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import AppSettings, settings
from app.core.errors import InvalidConfigurationError, RateLimitExceededError

logger = logging.getLogger(__name__)


LIMIT_SETTINGS: dict[str, str] = {
    "generation": "rate_limit_generation_requests",
    "lookup": "rate_limit_lookup_requests",
}


def build_rate_limiter(app_settings: AppSettings | None = None) -> InMemorySlidingWindowRateLimiter:
    """Create the limiter described by the application settings.

    Raises:
        InvalidConfigurationError: If the window or capacity is not positive.
    """
    cfg = app_settings or settings.app
    return InMemorySlidingWindowRateLimiter(
        window_seconds=cfg.rate_limit_window_seconds,
        max_tracked_clients=cfg.rate_limit_max_tracked_clients,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""
    return request.app.state.rate_limiter


def resolve_client_key(request: Request) -> str:
    """Derive the client key from request metadata.

    ``X-Forwarded-For`` may list a chain of proxies; the first entry is the
    originating client.
    """
    raw = request.headers.get(settings.app.rate_limit_client_header)
    if raw:
        first = raw.split(",")[0].strip()
        if first:
            return first
    return settings.app.rate_limit_anonymous_key


def resolve_limit(limit_name: str) -> int:
    """Look up the configured admissions-per-window for a named limit."""
    return getattr(settings.app, LIMIT_SETTINGS[limit_name])


def _hash_limiter_key(key: str) -> str:
    """Hash the client key so addresses never reach the logs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def enforce_rate_limit(limit_name: str) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency that admits requests under a named limit.

    Usage:
        @router.post("/x", dependencies=[Depends(enforce_rate_limit("generation"))])

    Raises:
        InvalidConfigurationError: If ``limit_name`` is unknown.
    """
    if limit_name not in LIMIT_SETTINGS:
        raise InvalidConfigurationError(
            code="invalid_configuration",
            message=f"Unknown rate limit '{limit_name}'",
            details={"field": "limit_name"},
        )

    async def dependency(request: Request) -> None:
        if not settings.app.rate_limit_enabled:
            return

        limiter = get_rate_limiter(request)
        key = resolve_client_key(request)
        limit = resolve_limit(limit_name)
        key_hash = _hash_limiter_key(key)

        try:
            result = limiter.check(key, limit=limit)
        except RateLimitExceededError as exc:
            logger.warning(
                "rate_limit.exceeded",
                extra={
                    "limit_name": limit_name,
                    "key_hash": key_hash,
                    "limit": limit,
                    "retry_after_s": (exc.details or {}).get("retry_after"),
                    "path": request.url.path,
                },
            )
            raise

        logger.info(
            "rate_limit.allowed",
            extra={
                "limit_name": limit_name,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )

    dependency.__name__ = f"enforce_{limit_name}_rate_limit"
    return dependency
