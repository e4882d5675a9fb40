"""Tests for the sliding-window rate limiter."""

from __future__ import annotations

import asyncio

import pytest

from skillforge.resilience.rate_limiter import RateLimiter


class FakeClock:
    """Manual clock; ``sleep`` advances time instead of waiting."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


async def test_grants_up_to_capacity_without_waiting(clock: FakeClock) -> None:
    limiter = RateLimiter(3, 1_000, clock=clock, sleep=clock.sleep)
    for _ in range(3):
        await limiter.acquire()
    assert clock.sleeps == []
    assert limiter.in_window == 3


async def test_waits_for_oldest_grant_to_expire(clock: FakeClock) -> None:
    limiter = RateLimiter(2, 1_000, clock=clock, sleep=clock.sleep)
    await limiter.acquire()
    clock.now = 0.25
    await limiter.acquire()
    clock.now = 0.5

    await limiter.acquire()

    assert clock.sleeps == [pytest.approx(0.5)]
    assert clock.now == pytest.approx(1.0)
    assert limiter.in_window == 2


async def test_window_never_exceeds_capacity(clock: FakeClock) -> None:
    limiter = RateLimiter(2, 1_000, clock=clock, sleep=clock.sleep)
    grant_times: list[float] = []
    for _ in range(6):
        await limiter.acquire()
        grant_times.append(clock.now)
    for i, t in enumerate(grant_times):
        in_window = [g for g in grant_times if t - 1.0 < g <= t]
        assert len(in_window) <= 2, (i, grant_times)


async def test_waiters_admitted_in_arrival_order(clock: FakeClock) -> None:
    limiter = RateLimiter(1, 1_000, clock=clock, sleep=clock.sleep)
    order: list[int] = []

    async def worker(n: int) -> None:
        await limiter.acquire()
        order.append(n)

    tasks = []
    for n in range(4):
        tasks.append(asyncio.create_task(worker(n)))
        await asyncio.sleep(0)
    await asyncio.gather(*tasks)

    assert order == [0, 1, 2, 3]


async def test_cancelled_waiter_consumes_no_slot(clock: FakeClock) -> None:
    blocker = asyncio.Event()

    async def blocking_sleep(seconds: float) -> None:
        await blocker.wait()

    limiter = RateLimiter(1, 1_000, clock=clock, sleep=blocking_sleep)
    await limiter.acquire()

    waiter = asyncio.create_task(limiter.acquire())
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert limiter.in_window == 1


def test_rejects_non_positive_configuration() -> None:
    with pytest.raises(ValueError):
        RateLimiter(0, 1_000)
    with pytest.raises(ValueError):
        RateLimiter(1, 0)
