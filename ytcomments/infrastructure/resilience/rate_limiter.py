"""Implementation of the shared outbound rate limiter.

Controls the frequency of outgoing requests to stay inside the API quota.
Uses a token bucket: `capacity` tokens, refilled at one token per
`interval_seconds`. One instance is created per run and passed to every task.
"""

import time
import asyncio
import logging
from typing import Callable, Optional

from ytcomments.infrastructure.resilience.cancellation import raise_if_cancelled, sleep_or_cancel

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 1            # Burst size
DEFAULT_INTERVAL_SECONDS = 1.0  # One token per second


class RateLimiter:
    """Token bucket rate limiter safe for concurrent asyncio tasks."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the rate limiter with a full bucket.

        Args:
            capacity: Maximum number of tokens held at once (burst size).
            interval_seconds: Time needed to refill one token.
            clock: Monotonic clock, injectable for tests.
        """
        if capacity < 1 or interval_seconds <= 0:
            raise ValueError("Capacity must be >= 1 and interval must be positive.")
        self.capacity = capacity
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._tokens = float(capacity)
        self._last_refill = clock()
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: capacity={capacity}, 1 token / {interval_seconds}s")

    @property
    def tokens(self) -> float:
        """Tokens available as of the last refill (for inspection only)."""
        return self._tokens

    def _refill(self) -> None:
        """Adds tokens for the time elapsed since the last refill. Caller holds the lock."""
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(float(self.capacity), self._tokens + elapsed / self.interval_seconds)
            self._last_refill = now

    def _time_until_token(self) -> float:
        return max(0.0, (1.0 - self._tokens) * self.interval_seconds)

    async def acquire(self, cancel_event: Optional[asyncio.Event] = None) -> None:
        """Waits until a token is available and consumes it.

        Args:
            cancel_event: Shared cancellation signal; checked before every wait.

        Raises:
            CancellationError: If the signal fires before a token is granted.
        """
        while True:
            raise_if_cancelled(cancel_event, "rate limit permit")
            async with self._lock:
                self._refill()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    logger.debug(f"Rate limit permit granted. Tokens left: {self._tokens:.2f}")
                    return
                wait_time = self._time_until_token()

            logger.debug(f"Rate limit reached. Waiting for {wait_time:.2f} seconds.")
            await sleep_or_cancel(wait_time, cancel_event)
            # Loop again; another task may have taken the token meanwhile

    async def get_wait_time(self) -> float:
        """Estimates the time needed before the next permit can be granted."""
        async with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                return 0.0
            return self._time_until_token()
