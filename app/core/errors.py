"""Application-level exception types.

Domain errors shared by adapters, services and the HTTP layer. Each carries a
stable machine-readable code so handlers can map it to a status code and a
consistent JSON envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    http_status: int
    field: str
    provider: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request input validation fails."""


class InvalidConfigurationError(AppError):
    """Raised when a component is constructed with unusable settings.

    A server-side fault: reaching the handler means the deployment is
    misconfigured, not that the client sent bad input.
    """


class RateLimitExceededError(AppError):
    """Raised when a client has no admissions left in the current window."""


class LLMAppError(AppError):
    """Raised when LLM provider/client operations fail."""


class UpstreamServiceError(AppError):
    """Raised when a third-party HTTP API fails or times out."""
