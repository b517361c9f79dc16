import asyncio
import time

import pytest

from ytcomments.domain.exceptions import CancellationError
from ytcomments.infrastructure.resilience.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.mark.parametrize("capacity, interval", [(0, 1.0), (1, 0), (2, -1.0)])
def test_invalid_configuration(capacity, interval):
    with pytest.raises(ValueError):
        RateLimiter(capacity=capacity, interval_seconds=interval)


@pytest.mark.asyncio
async def test_starts_full_and_grants_capacity_immediately():
    clock = FakeClock()
    limiter = RateLimiter(capacity=3, interval_seconds=1.0, clock=clock)

    for _ in range(3):
        await asyncio.wait_for(limiter.acquire(), timeout=0.5)

    assert limiter.tokens == pytest.approx(0.0)
    assert await limiter.get_wait_time() == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_refill_is_proportional_and_capped_at_capacity():
    clock = FakeClock()
    limiter = RateLimiter(capacity=2, interval_seconds=1.0, clock=clock)
    await limiter.acquire()
    await limiter.acquire()

    clock.now += 0.5
    assert await limiter.get_wait_time() == pytest.approx(0.5)

    clock.now += 100.0
    assert await limiter.get_wait_time() == 0.0
    assert limiter.tokens == pytest.approx(2.0)


@pytest.mark.asyncio
async def test_concurrent_acquires_respect_the_interval():
    """At most one grant per interval with capacity 1, however many tasks ask."""
    interval = 0.05
    limiter = RateLimiter(capacity=1, interval_seconds=interval)
    grants = []

    async def worker():
        await limiter.acquire()
        grants.append(time.monotonic())

    await asyncio.wait_for(asyncio.gather(*(worker() for _ in range(5))), timeout=5)

    grants.sort()
    gaps = [later - earlier for earlier, later in zip(grants, grants[1:])]
    assert len(grants) == 5
    assert all(gap >= interval * 0.9 for gap in gaps), gaps
    assert limiter.tokens >= 0.0


@pytest.mark.asyncio
async def test_burst_never_exceeds_capacity():
    interval = 0.1
    limiter = RateLimiter(capacity=2, interval_seconds=interval)
    grants = []

    async def worker():
        await limiter.acquire()
        grants.append(time.monotonic())

    await asyncio.wait_for(asyncio.gather(*(worker() for _ in range(6))), timeout=5)

    grants.sort()
    # Any C+1 consecutive grants must span at least one refill interval
    for i in range(len(grants) - 2):
        assert grants[i + 2] - grants[i] >= interval * 0.9
    assert 0.0 <= limiter.tokens <= 2.0


@pytest.mark.asyncio
async def test_acquire_with_preset_cancellation_raises_immediately():
    limiter = RateLimiter(capacity=1, interval_seconds=1.0)
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(CancellationError):
        await limiter.acquire(cancel_event)
    # The token was not consumed
    assert limiter.tokens == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_waiting_acquire_aborts_on_cancellation():
    limiter = RateLimiter(capacity=1, interval_seconds=30.0)
    cancel_event = asyncio.Event()
    await limiter.acquire(cancel_event)

    async def fire():
        await asyncio.sleep(0.05)
        cancel_event.set()

    started = time.monotonic()
    with pytest.raises(CancellationError):
        await asyncio.gather(limiter.acquire(cancel_event), fire())
    assert time.monotonic() - started < 2.0
