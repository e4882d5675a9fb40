"""Sliding-window limiter for outbound analysis-service calls.

One instance is shared by every pipeline invocation in the process.
Admission decisions are serialized through an ``asyncio.Lock``; the
lock's waiters are woken in arrival order, so callers are admitted
strictly FIFO once capacity frees up. Waiting is a cooperative
``await`` — no thread is parked per waiter.

Single-process only — each worker process has its own ledger.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

from skillforge.constants import (
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_MS,
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allows at most ``max_requests`` grants per trailing window.

    Usage::

        limiter = RateLimiter(50, 60_000)
        await limiter.acquire()  # may suspend, never fails
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_ms: int = RATE_LIMIT_WINDOW_MS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_requests <= 0 or window_ms <= 0:
            raise ValueError("max_requests and window_ms must be positive")
        self._max_requests = max_requests
        self._window = window_ms / 1000
        self._clock = clock
        self._sleep = sleep
        # Grant times, oldest first (clock is monotonic)
        self._granted: deque[float] = deque()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Suspend until a slot is free, then reserve it.

        Cancelling a waiter releases the lock without recording a
        grant, so an abandoned request never consumes capacity.
        """
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)
                if len(self._granted) < self._max_requests:
                    self._granted.append(now)
                    return
                wait = self._window - (now - self._granted[0])
                logger.info(
                    "event=rate_limit_wait wait_ms=%d in_window=%d",
                    int(wait * 1000),
                    len(self._granted),
                )
                await self._sleep(max(wait, 0.0))

    def _prune(self, now: float) -> None:
        while self._granted and now - self._granted[0] >= self._window:
            self._granted.popleft()

    @property
    def in_window(self) -> int:
        """Grants still counted against the current window."""
        self._prune(self._clock())
        return len(self._granted)

    @property
    def max_requests(self) -> int:
        return self._max_requests
