"""In-flight analysis deduplication.

Concurrent requests for the same content fingerprint share a single
upstream call: the first caller runs it, later callers await its
outcome. Together with the analysis cache this keeps identical
content from reaching the external service more than once.

Single-process only, like the cache it fronts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Collapses concurrent calls that share a key.

    Usage::

        flights: SingleFlight[AnalysisResult] = SingleFlight()
        result = await flights.run(fingerprint, compute)
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Future[T]] = {}

    async def run(
        self,
        key: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        existing = self._in_flight.get(key)
        if existing is not None:
            # shield: a cancelled follower must not cancel the leader
            return await asyncio.shield(existing)

        future: asyncio.Future[T] = (
            asyncio.get_running_loop().create_future()
        )
        self._in_flight[key] = future
        try:
            result = await operation()
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure is not logged
            future.exception()
            raise
        except BaseException:
            # Leader cancelled: followers see the cancellation too
            future.cancel()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._in_flight.pop(key, None)

    @property
    def active_keys(self) -> list[str]:
        """Return currently in-flight keys."""
        return list(self._in_flight.keys())
