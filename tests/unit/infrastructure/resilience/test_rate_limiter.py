import asyncio
import time

import pytest

from triagecli.infrastructure.resilience.rate_limiter import RateLimiter

INTERVAL = 0.05
# asyncio.sleep may wake a hair early on some platforms
TOLERANCE = 0.005


def test_schedule_returns_result_unchanged():
    limiter = RateLimiter(min_interval=0.0)

    async def work(x, y=0):
        return x + y

    assert asyncio.run(limiter.schedule(work, 2, y=3)) == 5


def test_schedule_propagates_errors():
    limiter = RateLimiter(min_interval=0.0)

    async def boom():
        raise RuntimeError("kaboom")

    with pytest.raises(RuntimeError, match="kaboom"):
        asyncio.run(limiter.schedule(boom))


def test_sequential_calls_are_spaced():
    limiter = RateLimiter(min_interval=INTERVAL)
    starts = []

    async def work():
        starts.append(time.monotonic())

    async def run():
        for _ in range(4):
            await limiter.schedule(work)

    asyncio.run(run())

    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert len(gaps) == 3
    assert all(gap >= INTERVAL - TOLERANCE for gap in gaps)


def test_concurrent_callers_are_serialized_in_fifo_order():
    limiter = RateLimiter(min_interval=INTERVAL)
    order = []
    starts = []

    async def work(name):
        order.append(name)
        starts.append(time.monotonic())

    async def run():
        await asyncio.gather(*(limiter.schedule(work, n) for n in range(5)))

    asyncio.run(run())

    assert order == [0, 1, 2, 3, 4]
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert all(gap >= INTERVAL - TOLERANCE for gap in gaps)


def test_first_call_is_not_delayed():
    limiter = RateLimiter(min_interval=10.0)

    async def run():
        assert await limiter.get_wait_time() == 0.0
        await limiter.wait_for_permission()
        return await limiter.get_wait_time()

    remaining = asyncio.run(run())
    assert 9.0 < remaining <= 10.0


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        RateLimiter(min_interval=-1)
