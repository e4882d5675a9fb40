"""Tests for RetryPolicy backoff and classification."""

from __future__ import annotations

import pytest

from skillforge.resilience.errors import (
    AuthError,
    RateLimitError,
    ServiceError,
)
from skillforge.resilience.retry import RetryPolicy


class Recorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.delays.append(seconds)


class Scripted:
    """Raises the queued errors in order, then returns ``value``."""

    def __init__(self, errors: list[Exception], value: str = "ok") -> None:
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


async def test_succeeds_after_rate_limits(recorder: Recorder) -> None:
    op = Scripted([RateLimitError("429")] * 3)
    policy = RetryPolicy(3, 1_000, 30_000, sleep=recorder.sleep)

    assert await policy.run(op) == "ok"
    assert op.calls == 4
    assert recorder.delays == [2.0, 4.0, 8.0]


async def test_exhaustion_raises_last_error(recorder: Recorder) -> None:
    errors = [RateLimitError("429", retry_after=n) for n in (1, 2, 3, 4)]
    op = Scripted(errors)
    policy = RetryPolicy(3, 1_000, 30_000, sleep=recorder.sleep)

    with pytest.raises(RateLimitError) as exc_info:
        await policy.run(op)

    assert exc_info.value.retry_after == 4
    assert op.calls == 4


async def test_non_retryable_propagates_immediately(
    recorder: Recorder,
) -> None:
    op = Scripted([AuthError("bad key")])
    policy = RetryPolicy(3, sleep=recorder.sleep)

    with pytest.raises(AuthError):
        await policy.run(op)

    assert op.calls == 1
    assert recorder.delays == []


async def test_delay_is_capped(recorder: Recorder) -> None:
    op = Scripted([ServiceError("503")] * 3)
    policy = RetryPolicy(3, 1_000, 5_000, sleep=recorder.sleep)

    await policy.run(op)

    assert recorder.delays == [2.0, 4.0, 5.0]


def test_delay_for() -> None:
    policy = RetryPolicy(3, 1_000, 30_000)
    assert [policy.delay_for(n) for n in (1, 2, 3, 5)] == [2, 4, 8, 30]


async def test_zero_retries_runs_once(recorder: Recorder) -> None:
    op = Scripted([ServiceError("503")])
    policy = RetryPolicy(0, sleep=recorder.sleep)
    with pytest.raises(ServiceError):
        await policy.run(op)
    assert op.calls == 1
