"""Cached grouped counts over task status and priority."""

import logging
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from sqlalchemy import func, select

from taskboard.domain.models import Outcome, TaskPriority, TaskStatus
from taskboard.domain.protocols import AggregateCache
from taskboard.domain.tags import (
    AGGREGATE_TAG,
    PRIORITY_COUNTS_KEY,
    PRIORITY_COUNTS_TAG,
    STATUS_COUNTS_KEY,
    STATUS_COUNTS_TAG,
    priority_count_key,
    priority_tag,
    status_count_key,
    status_tag,
)
from taskboard.queries.executor import STORAGE_ERRORS
from taskboard.storage.database import SessionFactory
from taskboard.storage.schema import TaskRow

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 900


class AggregateCounter:
    """Grouped task counts behind a tagged TTL cache.

    Failed storage reads degrade to 0 or an empty map and are not cached.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        cache: AggregateCache,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ) -> None:
        self._session_factory = session_factory
        self._cache = cache
        self._ttl = ttl_seconds

    async def count_by_status(self, status: TaskStatus) -> int:
        return (await self.count_by_status_outcome(status)).value

    async def count_by_priority(self, priority: TaskPriority) -> int:
        return (await self.count_by_priority_outcome(priority)).value

    async def status_counts(self) -> dict[TaskStatus, int]:
        return (await self.status_counts_outcome()).value

    async def priority_counts(self) -> dict[TaskPriority, int]:
        return (await self.priority_counts_outcome()).value

    async def count_by_status_outcome(self, status: TaskStatus) -> Outcome[int]:
        return await self._cached(
            status_count_key(status),
            [AGGREGATE_TAG, status_tag(status)],
            lambda: self._count_where(TaskRow.status, status.value),
            default=0,
        )

    async def count_by_priority_outcome(
        self, priority: TaskPriority
    ) -> Outcome[int]:
        return await self._cached(
            priority_count_key(priority),
            [AGGREGATE_TAG, priority_tag(priority)],
            lambda: self._count_where(TaskRow.priority, priority.value),
            default=0,
        )

    async def status_counts_outcome(self) -> Outcome[dict[TaskStatus, int]]:
        return await self._cached(
            STATUS_COUNTS_KEY,
            [AGGREGATE_TAG, STATUS_COUNTS_TAG],
            lambda: self._grouped_counts(TaskRow.status, TaskStatus),
            default={},
        )

    async def priority_counts_outcome(self) -> Outcome[dict[TaskPriority, int]]:
        return await self._cached(
            PRIORITY_COUNTS_KEY,
            [AGGREGATE_TAG, PRIORITY_COUNTS_TAG],
            lambda: self._grouped_counts(TaskRow.priority, TaskPriority),
            default={},
        )

    async def invalidate(self, tag: str) -> int:
        """Invalidate cached aggregates carrying the tag."""
        removed = await self._cache.invalidate(tag)
        logger.info(f"Invalidated {removed} aggregate(s) tagged '{tag}'")
        return removed

    async def invalidate_many(self, tags: Iterable[str]) -> int:
        total = 0
        for tag in tags:
            total += await self.invalidate(tag)
        return total

    async def _cached(
        self,
        key: str,
        tags: list[str],
        load: Callable[[], Awaitable[T]],
        default: T,
    ) -> Outcome[T]:
        cached = await self._cache.get(key)
        if cached is not None:
            return Outcome(_detached(cached))

        try:
            value = await load()
        except STORAGE_ERRORS as e:
            logger.warning(f"Aggregate '{key}' failed: {e}", exc_info=True)
            return Outcome(default, error=e)

        await self._cache.put(key, value, self._ttl, tags)
        logger.debug(f"Cached aggregate '{key}' for {self._ttl}s")
        return Outcome(_detached(value))

    async def _count_where(self, column, value: str) -> int:
        stmt = (
            select(func.count())
            .select_from(TaskRow)
            .where(column == value)
            .group_by(column)
            .having(func.count() > 0)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none() or 0

    async def _grouped_counts(self, column, enum_type: type[Any]) -> dict[Any, int]:
        stmt = (
            select(column, func.count())
            .group_by(column)
            .having(func.count() > 0)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.all()

        counts = {}
        for value, count in rows:
            try:
                counts[enum_type(value)] = count
            except ValueError:
                logger.warning(
                    f"Skipping {count} task(s) with unknown {column.key} '{value}'"
                )
        return counts


def _detached(value: T) -> T:
    """Copy cached maps so callers cannot mutate the shared entry."""
    if isinstance(value, dict):
        return dict(value)
    return value
