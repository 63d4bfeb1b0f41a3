"""
Analysis Result Cache

In-memory cache for analyzer results with two clocks per entry:
  - stale_after: younger entries are served without a new request
  - evict_after: older entries are dropped; in between they are
    served while a refetch runs (stale-while-revalidate)

Key = SHA-256(tier + text + sensitivity + discussion + topic).
The tier is part of the key, so the fast and slow tiers never write
the same entry.

Usage:
    from draftcheck.cache import ResultCache
    cache = ResultCache()
    key = cache.key_for(Tier.FAST, snapshot)
    entry = await cache.get(key)
    if entry and entry.is_fresh:
        return entry.result
    result = await client.analyze(snapshot)
    await cache.put(key, result, stale_after=30, evict_after=300)
"""

from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import dataclass
from typing import Callable, Optional

from draftcheck.models import ContentSnapshot
from draftcheck.schemas.feedback import AnalysisResult, Tier


@dataclass(frozen=True)
class CacheEntry:
    result: AnalysisResult
    stored_at: float
    stale_after: float
    evict_after: float
    age: float = 0.0

    @property
    def is_fresh(self) -> bool:
        return self.age < self.stale_after


class ResultCache:
    """Async-safe in-memory cache with per-entry freshness and eviction."""

    def __init__(
        self,
        max_entries: int = 500,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._cache: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock
        self._lock = asyncio.Lock()
        self._hits = 0
        self._stale_hits = 0
        self._misses = 0

    @staticmethod
    def key_for(tier: Tier, snapshot: ContentSnapshot) -> str:
        """SHA-256 over the tier and the snapshot identity."""
        raw = "||".join(
            [tier.value, snapshot.text, snapshot.sensitivity.value,
             snapshot.discussion_id or "", snapshot.topic_id or ""]
        )
        return hashlib.sha256(raw.encode()).hexdigest()

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry if it has not been evicted, stamped with its age."""
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._misses += 1
                return None

            age = self._clock() - entry.stored_at
            if age >= entry.evict_after:
                del self._cache[key]
                self._misses += 1
                return None

            if age < entry.stale_after:
                self._hits += 1
            else:
                self._stale_hits += 1
            return CacheEntry(
                result=entry.result,
                stored_at=entry.stored_at,
                stale_after=entry.stale_after,
                evict_after=entry.evict_after,
                age=age,
            )

    async def put(
        self,
        key: str,
        result: AnalysisResult,
        stale_after: float,
        evict_after: float,
    ) -> None:
        """Store a result. Evicts the oldest entry when full."""
        async with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                oldest_key = min(
                    self._cache, key=lambda k: self._cache[k].stored_at,
                )
                del self._cache[oldest_key]

            self._cache[key] = CacheEntry(
                result=result,
                stored_at=self._clock(),
                stale_after=stale_after,
                evict_after=max(evict_after, stale_after),
            )

    async def invalidate(self, key: str) -> None:
        async with self._lock:
            self._cache.pop(key, None)

    async def sweep(self) -> int:
        """Drop every evictable entry. Returns how many were removed."""
        now = self._clock()
        async with self._lock:
            expired = [
                k for k, e in self._cache.items()
                if now - e.stored_at >= e.evict_after
            ]
            for k in expired:
                del self._cache[k]
            return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def stats(self) -> dict:
        """Cache hit/miss statistics."""
        total = self._hits + self._stale_hits + self._misses
        return {
            "entries": len(self._cache),
            "hits": self._hits,
            "stale_hits": self._stale_hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }
