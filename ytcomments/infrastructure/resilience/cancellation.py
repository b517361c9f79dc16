"""Cooperative cancellation helpers shared by the rate limiter and retry service."""

import asyncio
import logging
from typing import Optional

from ytcomments.domain.exceptions import CancellationError

logger = logging.getLogger(__name__)


def raise_if_cancelled(cancel_event: Optional[asyncio.Event], what: str = "operation") -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancellationError(f"Cancelled before {what}")


async def sleep_or_cancel(delay: float, cancel_event: Optional[asyncio.Event] = None) -> None:
    """Sleeps for `delay` seconds, waking early if `cancel_event` fires.

    Raises:
        CancellationError: If the event is set before or during the sleep.
    """
    raise_if_cancelled(cancel_event, "sleep")
    if cancel_event is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=max(0.0, delay))
    except asyncio.TimeoutError:
        return
    logger.debug(f"Sleep of {delay:.2f}s interrupted by cancellation.")
    raise CancellationError(f"Cancelled while sleeping ({delay:.2f}s)")
