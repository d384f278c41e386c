"""In-memory sliding-window admission limiter.

Notes:
- Per-process only: each worker/replica enforces its own independent quota.
- Thread-safe: one lock guards the whole store, so the count-then-append for
  a key is atomic and the background sweep never interleaves with it.
- Eviction is approximate oldest-first, both on capacity pressure and in the
  periodic sweep; purging of a single key is lazy (done when it is touched).
"""

from __future__ import annotations

import heapq
import logging
import math
import threading
import time
from operator import itemgetter
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.core.errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Count admissions per client key over a trailing time window.

    A client is admitted while fewer than ``limit`` of its admissions fall
    inside the last ``window_seconds``. The limit is chosen per call, so one
    instance can serve endpoints with different quotas; the request log of a
    key is shared between them.

    The number of tracked keys is soft-capped at ``max_tracked_clients``.
    When an admission pushes the store over the cap, the keys whose oldest
    logged admission is earliest are forgotten, and their next request starts
    from a full quota.
    """

    def __init__(
        self,
        *,
        window_seconds: float,
        max_tracked_clients: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_seconds: Length of the sliding window in seconds.
            max_tracked_clients: Soft cap on distinct client keys in memory.
            clock: Time source returning UNIX time in seconds.

        Raises:
            InvalidConfigurationError: If either setting is not positive, or
                the window is not finite or exceeds ``threading.TIMEOUT_MAX``.
        """
        if (
            isinstance(window_seconds, bool)
            or not math.isfinite(window_seconds)
            or not 0 < window_seconds <= threading.TIMEOUT_MAX
        ):
            raise InvalidConfigurationError(
                code="invalid_configuration",
                message="window_seconds must be a finite positive duration",
                details={"field": "window_seconds"},
            )
        if (
            isinstance(max_tracked_clients, bool)
            or not isinstance(max_tracked_clients, int)
            or max_tracked_clients < 1
        ):
            raise InvalidConfigurationError(
                code="invalid_configuration",
                message="max_tracked_clients must be a positive integer",
                details={"field": "max_tracked_clients"},
            )

        self._window_seconds = float(window_seconds)
        self._max_tracked_clients = max_tracked_clients
        self._clock = clock
        self._lock = threading.RLock()
        self._logs: dict[str, list[float]] = {}
        self._sweeper: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def max_tracked_clients(self) -> int:
        return self._max_tracked_clients

    @property
    def tracked_clients(self) -> int:
        """Number of client keys currently held in memory."""
        with self._lock:
            return len(self._logs)

    def snapshot(self, key: str) -> tuple[float, ...]:
        """Return the logged admission timestamps for ``key`` (no purge)."""
        with self._lock:
            return tuple(self._logs.get(key, ()))

    def _fresh_entries(self, log: list[float], now: float) -> list[float]:
        # Filter rather than pop from the left: a clock step backwards can
        # leave the log out of order.
        return [ts for ts in log if now - ts < self._window_seconds]

    def _purge_key_locked(self, key: str, now: float) -> list[float]:
        """Drop stale entries of one key; remove the key if nothing is left."""
        log = self._logs.get(key)
        if log is None:
            return []

        fresh = self._fresh_entries(log, now)
        if fresh:
            self._logs[key] = fresh
        else:
            del self._logs[key]
        return fresh

    def _evict_over_capacity_locked(self, admitted_key: str) -> None:
        excess = len(self._logs) - self._max_tracked_clients
        if excess <= 0:
            return

        candidates = (
            (key, min(log)) for key, log in self._logs.items() if key != admitted_key
        )
        oldest = heapq.nsmallest(excess, candidates, key=itemgetter(1))
        for key, _ in oldest:
            del self._logs[key]

        logger.debug(
            "rate_limit.evicted",
            extra={
                "evicted": len(oldest),
                "tracked": len(self._logs),
                "max_tracked": self._max_tracked_clients,
            },
        )

    def _reset_at(self, log: list[float]) -> float:
        return min(log) + self._window_seconds

    def consume(self, key: str, *, limit: int) -> RateLimitResult:
        """Admit and count the request, or report that the quota is spent.

        Args:
            key: Client key (non-empty, compared case-sensitively).
            limit: Max admissions per window for this call site.

        Returns:
            RateLimitResult with the decision. A rejected call leaves the
            key's log untouched apart from purging stale entries.

        Raises:
            ValueError: If key is empty or limit is below 1.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            # read under the lock so each log stays in insertion order
            now = self._clock()
            log = self._purge_key_locked(key, now)

            if len(log) >= limit:
                reset_at = self._reset_at(log)
                retry_after = max(1, int(math.ceil(reset_at - now)))
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=int(math.ceil(reset_at)),
                    retry_after_seconds=retry_after,
                )

            log.append(now)
            self._logs[key] = log
            self._evict_over_capacity_locked(key)

            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=max(0, limit - len(log)),
                reset_at=int(math.ceil(self._reset_at(log))),
                retry_after_seconds=None,
            )

    def sweep(self) -> int:
        """Purge stale entries from every key and drop keys left empty.

        Returns:
            Number of client keys removed.
        """
        removed = 0

        with self._lock:
            now = self._clock()
            for key in list(self._logs):
                fresh = self._fresh_entries(self._logs[key], now)
                if fresh:
                    self._logs[key] = fresh
                else:
                    del self._logs[key]
                    removed += 1
            tracked = len(self._logs)

        logger.debug(
            "rate_limit.sweep",
            extra={"removed": removed, "tracked": tracked},
        )
        return removed

    def start_sweeper(self) -> None:
        """Run ``sweep`` every ``window_seconds`` on a daemon thread."""
        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return

            self._stop_event = threading.Event()
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                args=(self._stop_event,),
                name="rate-limit-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    def stop_sweeper(self, timeout: float | None = 1.0) -> None:
        """Stop the background sweep thread if it is running."""
        with self._lock:
            thread, self._sweeper = self._sweeper, None
            self._stop_event.set()

        if thread is not None:
            thread.join(timeout)

    def _sweep_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._window_seconds):
            self.sweep()
