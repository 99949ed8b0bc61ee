"""In-memory tagged TTL cache for aggregate counts."""

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with its expiry and tags."""

    key: str
    value: Any
    expires_at: float
    tags: frozenset[str]

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryAggregateCache:
    """Process-wide cache with per-entry TTL and tag-based invalidation."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._keys_by_tag: dict[str, set[str]] = {}

    async def get(self, key: str) -> Optional[Any]:
        """Get cached value, None on miss or expiry."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._evict(key)
            return None
        return entry.value

    async def put(
        self, key: str, value: Any, ttl_seconds: float, tags: Iterable[str] = ()
    ) -> None:
        """Cache a value; an existing entry under the same key is replaced."""
        self._evict(key)
        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=self._clock() + ttl_seconds,
            tags=frozenset(tags),
        )
        self._entries[key] = entry
        for tag in entry.tags:
            self._keys_by_tag.setdefault(tag, set()).add(key)

    async def invalidate(self, tag: str) -> int:
        """Remove every entry carrying the tag."""
        keys = self._keys_by_tag.pop(tag, set())
        removed = 0
        for key in keys:
            if self._evict(key):
                removed += 1
        return removed

    async def clear(self) -> None:
        """Clear entire cache."""
        self._entries.clear()
        self._keys_by_tag.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        for tag in entry.tags:
            keys = self._keys_by_tag.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._keys_by_tag[tag]
        return True
