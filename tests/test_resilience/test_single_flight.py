"""Tests for in-flight call deduplication."""

from __future__ import annotations

import asyncio

import pytest

from skillforge.resilience.single_flight import SingleFlight


async def test_concurrent_callers_share_one_call() -> None:
    flights: SingleFlight[int] = SingleFlight()
    release = asyncio.Event()
    calls = 0

    async def compute() -> int:
        nonlocal calls
        calls += 1
        await release.wait()
        return 42

    tasks = [
        asyncio.create_task(flights.run("k", compute)) for _ in range(5)
    ]
    await asyncio.sleep(0)
    assert flights.active_keys == ["k"]
    release.set()

    assert await asyncio.gather(*tasks) == [42] * 5
    assert calls == 1
    assert flights.active_keys == []


async def test_failure_reaches_every_waiter() -> None:
    flights: SingleFlight[int] = SingleFlight()
    release = asyncio.Event()

    async def compute() -> int:
        await release.wait()
        raise RuntimeError("upstream down")

    tasks = [
        asyncio.create_task(flights.run("k", compute)) for _ in range(3)
    ]
    await asyncio.sleep(0)
    release.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RuntimeError) for r in results)
    assert flights.active_keys == []


async def test_key_is_reusable_after_completion() -> None:
    flights: SingleFlight[str] = SingleFlight()

    async def compute() -> str:
        return "v"

    assert await flights.run("k", compute) == "v"
    assert await flights.run("k", compute) == "v"


async def test_different_keys_run_independently() -> None:
    flights: SingleFlight[str] = SingleFlight()

    async def make(value: str) -> str:
        await asyncio.sleep(0)
        return value

    a, b = await asyncio.gather(
        flights.run("a", lambda: make("A")),
        flights.run("b", lambda: make("B")),
    )
    assert (a, b) == ("A", "B")


async def test_cancelled_follower_does_not_cancel_leader() -> None:
    flights: SingleFlight[int] = SingleFlight()
    release = asyncio.Event()

    async def compute() -> int:
        await release.wait()
        return 7

    leader = asyncio.create_task(flights.run("k", compute))
    await asyncio.sleep(0)
    follower = asyncio.create_task(flights.run("k", compute))
    await asyncio.sleep(0)
    follower.cancel()
    with pytest.raises(asyncio.CancelledError):
        await follower

    release.set()
    assert await leader == 7
