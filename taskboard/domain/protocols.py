"""Protocol definitions for dependency injection."""

from typing import Any, Iterable, Optional, Protocol, runtime_checkable

from .models import TaskPage, TaskPriority, TaskQuery, TaskStatus


@runtime_checkable
class AggregateCache(Protocol):
    """Protocol for the tagged TTL cache holding aggregate counts."""

    async def get(self, key: str) -> Optional[Any]:
        """Get a cached value, None on miss or expiry."""
        ...

    async def put(
        self, key: str, value: Any, ttl_seconds: float, tags: Iterable[str] = ()
    ) -> None:
        """Cache a value for ttl_seconds under the given tags."""
        ...

    async def invalidate(self, tag: str) -> int:
        """Drop every entry carrying the tag, return how many were dropped."""
        ...

    async def clear(self) -> None:
        """Clear entire cache."""
        ...


@runtime_checkable
class TaskReader(Protocol):
    """Protocol for paginated task reads."""

    async def get_tasks(self, query: TaskQuery) -> TaskPage:
        """Return one page of tasks, never raising on storage failure."""
        ...


@runtime_checkable
class TaskCounter(Protocol):
    """Protocol for cached aggregate counts."""

    async def count_by_status(self, status: TaskStatus) -> int:
        ...

    async def count_by_priority(self, priority: TaskPriority) -> int:
        ...

    async def status_counts(self) -> dict[TaskStatus, int]:
        ...

    async def priority_counts(self) -> dict[TaskPriority, int]:
        ...

    async def invalidate(self, tag: str) -> int:
        ...
