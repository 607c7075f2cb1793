"""
Token-bucket rate limiter for SciX API requests.

One limiter is created per process and shared by reference with every
client (see ``scix_client.container``). It enforces a local request budget
and also honours the quota the server reports in its response headers:

    X-RateLimit-Remaining: 0
    X-RateLimit-Reset: 1735689600      (Unix epoch seconds)

When the server says the quota is exhausted, ``acquire()`` waits until the
reset time even if local tokens are available.

Example:
    limiter = RateLimiter(capacity=5)      # 5 requests / second
    await limiter.acquire()
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"

# Float slack when comparing refilled tokens against a whole token.
_EPSILON = 1e-9


@dataclass
class ServerLimitState:
    """Server-reported quota. ``reset_at`` is on the limiter's monotonic clock."""

    remaining: int | None = None
    reset_at: float | None = None

    def wait_time(self, now: float) -> float:
        if self.remaining == 0 and self.reset_at is not None and self.reset_at > now:
            return self.reset_at - now
        return 0.0


@dataclass(frozen=True)
class RateLimiterSnapshot:
    """Point-in-time view of the limiter, for diagnostics."""

    capacity: float
    tokens: float
    refill_rate: float
    server_remaining: int | None
    server_reset_in: float | None


class RateLimiter:
    """
    Token bucket with server-limit override.

    ``capacity`` tokens are available at start; they refill continuously at
    ``capacity / per`` tokens per second and never exceed ``capacity``.
    Each ``acquire()`` consumes one token, waiting if none is available.

    The check-refill-deduct transition runs under an ``asyncio.Lock``, so
    concurrent tasks can never over-spend the budget; waiters are served
    in arrival order. Waiting suspends only the calling task.
    """

    def __init__(
        self,
        capacity: float = 5.0,
        per: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity!r}")
        if per <= 0:
            raise ValueError(f"per must be positive, got {per!r}")
        self.capacity = float(capacity)
        self.refill_rate = self.capacity / per
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep
        self._tokens = self.capacity
        self._last_refill_at = clock()
        self._server = ServerLimitState()
        self._lock = asyncio.Lock()

    @property
    def tokens(self) -> float:
        """Currently available tokens (refill applied, state untouched)."""
        elapsed = max(0.0, self._clock() - self._last_refill_at)
        return min(self.capacity, self._tokens + elapsed * self.refill_rate)

    @property
    def server_state(self) -> ServerLimitState:
        return self._server

    async def acquire(self) -> float:
        """
        Wait until a request is allowed, then consume one token.

        Never fails, only delays.

        Returns:
            Total seconds spent waiting.
        """
        waited = 0.0
        async with self._lock:
            while True:
                now = self._clock()
                self._refill(now)
                wait = self._wait_time(now)
                if wait <= 0:
                    self._tokens = max(0.0, self._tokens - 1.0)
                    return waited
                logger.debug(f"Rate limit: waiting {wait:.3f}s")
                await self._sleep(wait)
                waited += wait

    async def __aenter__(self) -> RateLimiter:
        await self.acquire()
        return self

    async def __aexit__(self, *args: object) -> None:
        pass

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Record server quota from response headers. Unparseable values are ignored."""
        lowered = {key.lower(): value for key, value in headers.items()}
        remaining = _parse_int(lowered.get(REMAINING_HEADER))
        reset_epoch = _parse_int(lowered.get(RESET_HEADER))

        if remaining is not None:
            self._server.remaining = max(0, remaining)
        if reset_epoch is not None:
            delta = reset_epoch - self._wall_clock()
            self._server.reset_at = self._clock() + delta if delta > 0 else None

        if remaining == 0:
            logger.warning(f"Server quota exhausted, reset in {self._server.wait_time(self._clock()):.0f}s")

    def note_retry_after(self, seconds: float) -> None:
        """Block further requests for *seconds* after an HTTP 429."""
        deadline = self._clock() + max(0.0, seconds)
        self._server.remaining = 0
        if self._server.reset_at is None or self._server.reset_at < deadline:
            self._server.reset_at = deadline

    def snapshot(self) -> RateLimiterSnapshot:
        now = self._clock()
        reset_in = None
        if self._server.reset_at is not None:
            reset_in = max(0.0, self._server.reset_at - now)
        return RateLimiterSnapshot(
            capacity=self.capacity,
            tokens=self.tokens,
            refill_rate=self.refill_rate,
            server_remaining=self._server.remaining,
            server_reset_in=reset_in,
        )

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_refill_at)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.refill_rate)
        self._last_refill_at = now
        if self._server.reset_at is not None and self._server.reset_at <= now:
            # Quota window rolled over.
            self._server = ServerLimitState()

    def _wait_time(self, now: float) -> float:
        if self._tokens + _EPSILON >= 1.0:
            local_wait = 0.0
        else:
            local_wait = (1.0 - self._tokens) / self.refill_rate
        return max(local_wait, self._server.wait_time(now))


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value.strip()))
    except (ValueError, AttributeError):
        logger.debug(f"Ignoring malformed rate-limit header value: {value!r}")
        return None
