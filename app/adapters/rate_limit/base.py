"""Rate limiter interfaces.

The HTTP layer talks to this abstraction so the storage backend can change
without touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.core.errors import RateLimitExceededError


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single admission decision.

    Attributes:
        allowed: Whether the request was admitted (and counted).
        limit: Max admissions per window requested by the call site.
        remaining: Admissions left in the window after this decision.
        reset_at: UNIX epoch seconds when the oldest counted admission
            leaves the window.
        retry_after_seconds: Suggested wait in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for admission limiters."""

    @abstractmethod
    def consume(self, key: str, *, limit: int) -> RateLimitResult:
        """Decide whether ``key`` may proceed and count it if so.

        Args:
            key: Client key (e.g., originating IP address).
            limit: Max admissions per window for this call site.

        Returns:
            RateLimitResult describing the decision. Never raises for a
            rejected request.
        """
        raise NotImplementedError

    def check(self, key: str, *, limit: int) -> RateLimitResult:
        """Admit ``key`` or raise.

        Raises:
            RateLimitExceededError: When the client has no quota left.
        """
        result = self.consume(key, limit=limit)
        if result.allowed:
            return result

        raise RateLimitExceededError(
            code="rate_limit_exceeded",
            message="Too many requests. Please try again later.",
            details={
                "limit": result.limit,
                "remaining": result.remaining,
                "reset_at": result.reset_at,
                "retry_after": result.retry_after_seconds or 0,
                "http_status": 429,
            },
        )
