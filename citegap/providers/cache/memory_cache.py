"""In-process LRU cache with per-entry expiry.

Values are stored as JSON text so that what comes back out of the cache is
exactly what a networked cache (Redis) would return.
"""

import json
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

DEFAULT_MAX_ENTRIES = 10_000


@dataclass
class _Entry:
    value: str
    expires_at: float  # 0 means no expiry


class MemoryCache:
    """LRU cache implementing the CacheProvider interface."""

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize memory cache.

        Args:
            max_entries: Entries beyond this bound evict the least recently used
            clock: Monotonic time source in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._clock = clock
        self.hits = 0
        self.misses = 0

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if entry.expires_at > 0 and self._clock() > entry.expires_at:
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return json.loads(entry.value)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        expires_at = self._clock() + ttl if ttl > 0 else 0.0
        self._entries[key] = _Entry(value=json.dumps(value), expires_at=expires_at)
        self._entries.move_to_end(key)

        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Memory cache evicted {evicted}")

    def stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total else 0.0,
        }
