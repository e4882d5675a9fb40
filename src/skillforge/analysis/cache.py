"""In-memory, TTL-bounded memo of validated analyses.

Entries carry their own expiry timestamp and are checked lazily on
read; a max-entry bound evicts least-recently-used entries. Contents
are derived data only and reset on process restart.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from skillforge.analysis.schemas import AnalysisResult
from skillforge.constants import (
    ANALYSIS_CACHE_MAX_ENTRIES,
    ANALYSIS_CACHE_TTL_SECONDS,
)

logger = logging.getLogger(__name__)


def fingerprint(content: str, content_type: str) -> str:
    """Deterministic cache key for (content, content type).

    Null-byte delimited so ("ab", "c") and ("a", "bc") never collide.
    """
    payload = f"{content_type}\x00{content}"
    digest = hashlib.sha256(payload.encode()).hexdigest()
    return f"{content_type}:{digest}"


@dataclass(frozen=True)
class _Entry:
    result: AnalysisResult
    expires_at: float


class AnalysisCache:
    """LRU map of fingerprint → AnalysisResult with per-entry TTL.

    All methods are synchronous and never await, so they are atomic
    with respect to other coroutines on the event loop.
    """

    def __init__(
        self,
        ttl_seconds: float = ANALYSIS_CACHE_TTL_SECONDS,
        max_entries: int = ANALYSIS_CACHE_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> AnalysisResult | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            self.misses += 1
            logger.debug("event=cache_expired key=%s", key)
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.result

    def put(
        self,
        key: str,
        result: AnalysisResult,
        ttl_seconds: float | None = None,
    ) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        self._entries[key] = _Entry(
            result=result, expires_at=self._clock() + ttl
        )
        self._entries.move_to_end(key)
        if len(self._entries) > self._max_entries:
            self.purge_expired()
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("event=cache_evicted key=%s", evicted)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        expired = [
            k for k, e in self._entries.items() if e.expires_at <= now
        ]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Live-entry check; leaves stats and LRU order untouched."""
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and entry.expires_at > self._clock()
