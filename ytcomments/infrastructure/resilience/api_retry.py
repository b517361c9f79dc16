"""Service for executing remote operations with automatic retries.

Implements exponential backoff (with optional jitter) for transient errors
like rate limits (429), quota responses or temporary server issues (5xx).
The service is policy-agnostic: every exception is retried unless its type
is listed in `non_retryable`. Cancellation always ends the loop at once.
"""

import logging
import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from ytcomments.domain.events.fetch_events import AttemptFailed, RetriesExhausted, RetryScheduled
from ytcomments.domain.exceptions import CancellationError, MaxRetryError
from ytcomments.domain.models.common import BackoffPolicy
from ytcomments.infrastructure.resilience.cancellation import sleep_or_cancel

T = TypeVar("T")

logger = logging.getLogger(__name__)


def dispatch_event(event: Any) -> None:
    logger.debug(f"EVENT: {event}")


class ApiRetryService:
    """Re-invokes a zero-argument coroutine function until it succeeds or the budget is spent."""

    def __init__(
        self,
        policy: Optional[BackoffPolicy] = None,
        non_retryable: Tuple[Type[BaseException], ...] = (),
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the ApiRetryService.

        Args:
            policy: Backoff configuration. Defaults to BackoffPolicy().
            non_retryable: Exception types re-raised immediately (without
                wrapping) instead of being retried. Empty means blanket retry.
            rng: Random source for jitter, injectable for tests.
            clock: Monotonic clock used for the elapsed-time budget.
        """
        self.policy = policy or BackoffPolicy()
        self.non_retryable = tuple(non_retryable)
        self._rng = rng or random.Random()
        self._clock = clock

        logger.info(
            f"ApiRetryService initialized: initial={self.policy.initial_interval}s, "
            f"factor={self.policy.multiplier}, jitter={self.policy.randomization_factor}, "
            f"max_interval={self.policy.max_interval}s, max_elapsed={self.policy.max_elapsed_seconds}s, "
            f"max_retries={self.policy.max_retries}"
        )
        logger.debug(f"Non-retryable Exceptions: {self.non_retryable or 'None'}")

    def _randomize(self, interval: float) -> float:
        factor = self.policy.randomization_factor
        if factor <= 0:
            return interval
        delta = factor * interval
        return self._rng.uniform(interval - delta, interval + delta)

    def _budget_spent(self, retries_done: int, elapsed: float, next_delay: float) -> bool:
        if self.policy.max_retries is not None and retries_done >= self.policy.max_retries:
            return True
        max_elapsed = self.policy.max_elapsed_seconds
        if max_elapsed is not None and elapsed + next_delay > max_elapsed:
            return True
        return False

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        description: str = "operation",
        cancel_event: Optional[asyncio.Event] = None,
    ) -> T:
        """Executes `operation`, retrying with exponential backoff on failure.

        Backoff sleeps never consume rate-limiter tokens; if each attempt
        needs a permit, `operation` must acquire it itself.

        Args:
            operation: Zero-argument async callable performing one attempt.
            description: Name used in logs and events (e.g., the video URL).
            cancel_event: Shared cancellation signal, checked during backoff.

        Returns:
            The result of the first successful attempt.

        Raises:
            MaxRetryError: If the budget is spent; chained from the last error.
            CancellationError: If cancellation fires during an attempt or sleep.
            Exception: A `non_retryable` exception, re-raised unchanged.
        """
        start = self._clock()
        interval = self.policy.initial_interval
        attempt = 0

        while True:
            attempt += 1
            try:
                return await operation()
            except CancellationError:
                logger.info(f"{description}: cancelled during attempt {attempt}.")
                raise
            except self.non_retryable as e:
                logger.error(f"Non-retryable error for {description} on attempt {attempt}: {e}")
                raise
            except Exception as e:
                dispatch_event(AttemptFailed(
                    target=description, attempt_number=attempt,
                    error_type=type(e).__name__, error_message=str(e),
                ))
                delay = self._randomize(interval)
                elapsed = self._clock() - start
                if self._budget_spent(attempt - 1, elapsed, delay):
                    logger.error(f"Retry budget spent for {description} after {attempt} attempt(s). Last error: {e}")
                    dispatch_event(RetriesExhausted(
                        target=description, attempts=attempt,
                        error_type=type(e).__name__, error_message=str(e),
                    ))
                    raise MaxRetryError(e, attempt) from e

                logger.warning(
                    f"Attempt {attempt} failed for {description}: {type(e).__name__}: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                dispatch_event(RetryScheduled(target=description, attempt_number=attempt, delay_seconds=delay))
                await sleep_or_cancel(delay, cancel_event)
                interval = min(interval * self.policy.multiplier, self.policy.max_interval)
