from __future__ import annotations

import time

from ..cache.config import DEFAULT_CACHE_CONFIG, CacheConfig
from ..cache.memory import Clock, TTLCache


class ClientCache(TTLCache):
    """One instance per client or session; never shared across callers."""

    def __init__(self, config: CacheConfig = DEFAULT_CACHE_CONFIG, clock: Clock = time.monotonic) -> None:
        super().__init__(default_ttl=config.client_ttl_seconds, clock=clock)

    def clear(self, key: str | None = None) -> int:
        """Drop ``key`` when given, otherwise everything."""
        if key is not None:
            return int(self.delete(key))
        return super().clear()
