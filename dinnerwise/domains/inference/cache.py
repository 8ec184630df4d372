"""
Response Cache - In-memory result caching with TTL, LRU and in-flight dedup.

Avoids paying twice for the same request: finished results are cached by
fingerprint, and concurrent duplicates wait on the caller already
resolving it instead of calling the provider themselves.

None of the mutating methods suspend, so on the event loop each one is
atomic with respect to every other operation on the same fingerprint.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import OrderedDict
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from .models import CacheEntry, InferenceResult

logger = logging.getLogger(__name__)

__all__ = ["ResponseCacheImpl"]


class ResponseCacheImpl:
    """
    In-memory response cache with TTL.

    Features:
    - Lazy TTL expiration (checked on read, no background sweeper)
    - Least-recently-used eviction past ``max_size``
    - In-flight registry collapsing concurrent duplicates
    - Hit/miss tracking for analytics
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached entries
            default_ttl: Default TTL in seconds
            clock: Monotonic time source in seconds
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._in_flight: dict[str, asyncio.Event] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._clock = clock
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    async def get(self, fingerprint: str) -> InferenceResult | None:
        """Get cached result if not expired."""
        entry = self._entries.get(fingerprint)
        if entry is None:
            self._misses += 1
            return None

        if not entry.is_fresh(self._clock()):
            del self._entries[fingerprint]
            self._misses += 1
            logger.debug("Cache entry expired: %s", fingerprint[:16])
            return None

        self._entries.move_to_end(fingerprint)
        self._hits += 1
        logger.debug("Cache hit: %s", fingerprint[:16])
        return entry.result

    async def put(
        self,
        fingerprint: str,
        result: InferenceResult,
        ttl: float | None = None,
    ) -> None:
        """Cache a result. Last writer wins."""
        ttl = ttl if ttl is not None else self._default_ttl
        self._entries[fingerprint] = CacheEntry(
            fingerprint=fingerprint,
            result=result,
            stored_at=self._clock(),
            ttl=ttl,
        )
        self._entries.move_to_end(fingerprint)
        self._evict_overflow()

        logger.debug("Cached result: %s (TTL: %.0fs)", fingerprint[:16], ttl)

    async def begin_in_flight(self, fingerprint: str) -> bool:
        """
        Claim a fingerprint for resolution.

        Returns:
            True if another caller already holds the claim
        """
        if fingerprint in self._in_flight:
            return True
        self._in_flight[fingerprint] = asyncio.Event()
        return False

    async def await_in_flight(
        self, fingerprint: str, timeout: float
    ) -> InferenceResult | None:
        """
        Wait for the current holder to finish, then re-check the cache.

        Args:
            fingerprint: Claimed fingerprint
            timeout: Seconds to wait before giving up on the holder

        Returns:
            The cached result, or None if the holder failed or is still busy
        """
        event = self._in_flight.get(fingerprint)
        if event is not None:
            try:
                await asyncio.wait_for(event.wait(), timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "Gave up waiting %.1fs for in-flight request: %s",
                    timeout,
                    fingerprint[:16],
                )
        return await self.get(fingerprint)

    def end_in_flight(self, fingerprint: str) -> None:
        """Release a claim and wake everyone waiting on it."""
        event = self._in_flight.pop(fingerprint, None)
        if event is None:
            logger.warning("end_in_flight without a claim: %s", fingerprint[:16])
            return
        event.set()

    @asynccontextmanager
    async def claim(self, fingerprint: str) -> AsyncIterator[bool]:
        """
        Scoped in-flight claim.

        Yields True when this caller owns the claim; the claim is released
        on every exit path, cancellation included. Non-owners release nothing.
        """
        owner = not await self.begin_in_flight(fingerprint)
        try:
            yield owner
        finally:
            if owner:
                self.end_in_flight(fingerprint)

    def is_in_flight(self, fingerprint: str) -> bool:
        return fingerprint in self._in_flight

    async def invalidate(self, pattern: str) -> int:
        """Invalidate cache entries whose fingerprint matches pattern."""
        regex = re.compile(pattern)
        keys_to_delete = [k for k in self._entries if regex.search(k)]

        for key in keys_to_delete:
            del self._entries[key]

        logger.info("Invalidated %d cache entries matching: %s", len(keys_to_delete), pattern)
        return len(keys_to_delete)

    async def clear(self) -> None:
        """Clear all cache entries. In-flight claims are left alone."""
        count = len(self._entries)
        self._entries.clear()
        logger.info("Cleared %d cache entries", count)

    def _evict_overflow(self) -> None:
        """Drop least-recently-used entries beyond max_size."""
        evicted = 0
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)
            evicted += 1

        if evicted:
            self._evictions += evicted
            logger.debug("Evicted %d least-recently-used cache entries", evicted)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
            "in_flight": len(self._in_flight),
        }
