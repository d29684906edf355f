from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import DEFAULT_CACHE_CONFIG, CacheConfig

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    key: str
    data: Any
    timestamp: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class TTLCache:
    """
    Dict-backed cache with per-entry TTL (seconds) and lazy eviction.

    Expired entries are only removed when they are read; there is no
    background sweep. No locking: callers get read-your-own-write consistency
    within one process and nothing more.
    """

    def __init__(self, default_ttl: float, clock: Clock = time.monotonic) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl
        self._clock = clock
        self._hits = 0
        self._misses = 0

    def _live_entry(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Any | None:
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.data

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._entries[key] = CacheEntry(
            key=key,
            data=value,
            timestamp=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
        )

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        doomed = [key for key in self._entries if key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        return count

    def keys(self) -> list[str]:
        return list(self._entries)

    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "keys": self.keys(),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


class MemoryCache(TTLCache):
    """Process-wide cache for derived views, keyed ``<domain>:<view>``."""

    def __init__(self, config: CacheConfig = DEFAULT_CACHE_CONFIG, clock: Clock = time.monotonic) -> None:
        super().__init__(default_ttl=config.view_ttl_seconds, clock=clock)

    def clear(self) -> int:
        count = super().clear()
        logger.info("Cleared %d process cache entries", count)
        return count
