"""Exponential-backoff retry driven by typed error classification."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from skillforge.constants import (
    RETRY_BASE_DELAY_MS,
    RETRY_MAX_DELAY_MS,
    RETRY_MAX_RETRIES,
)
from skillforge.resilience.errors import SkillForgeError, is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Runs an async operation, retrying only retryable error kinds.

    ``max_retries`` counts retries after the first attempt, so an
    operation runs at most ``max_retries + 1`` times. The delay before
    retry *n* (1-based) is ``min(2**n * base, cap)`` — 2s, 4s, 8s with
    the defaults. Non-retryable errors propagate immediately; after the
    last attempt the last error propagates unchanged.
    """

    def __init__(
        self,
        max_retries: int = RETRY_MAX_RETRIES,
        base_delay_ms: int = RETRY_BASE_DELAY_MS,
        max_delay_ms: int = RETRY_MAX_DELAY_MS,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_retries = max_retries
        self._base = base_delay_ms / 1000
        self._cap = max_delay_ms / 1000
        self._sleep = sleep

    def delay_for(self, retry_number: int) -> float:
        """Backoff in seconds before the given retry (1-based)."""
        return min((2**retry_number) * self._base, self._cap)

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            # attempt_number n waits multiplier * 2**(n-1) == base * 2**n
            wait=wait_exponential(
                multiplier=2 * self._base, max=self._cap
            ),
            retry=retry_if_exception(is_retryable),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        return await retrying(operation)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = (
            retry_state.outcome.exception()
            if retry_state.outcome is not None
            else None
        )
        delay = (
            retry_state.next_action.sleep
            if retry_state.next_action is not None
            else 0.0
        )
        kind = (
            error.kind
            if isinstance(error, SkillForgeError)
            else type(error).__name__
        )
        logger.warning(
            "event=retry_scheduled attempt=%d max_retries=%d"
            " delay_ms=%d kind=%s",
            retry_state.attempt_number,
            self.max_retries,
            int(delay * 1000),
            kind,
        )
