"""Rate limiting adapters.

Endpoints depend on AbstractRateLimiter only; the in-memory sliding-window
implementation is per-process and can later be replaced by a shared store.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
]
