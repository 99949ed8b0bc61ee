"""Repository implementations."""

from .memory import CacheEntry, InMemoryAggregateCache

__all__ = [
    "CacheEntry",
    "InMemoryAggregateCache",
]
