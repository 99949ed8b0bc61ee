"""Filtered, sorted, paginated task reads."""

import logging

from taskboard.domain.models import Outcome, TaskPage, TaskQuery
from taskboard.queries.composer import compose
from taskboard.queries.executor import PaginatedQueryExecutor

logger = logging.getLogger(__name__)


class TaskQueryService:
    """Task query service composing requests and running them against storage."""

    def __init__(self, executor: PaginatedQueryExecutor) -> None:
        self._executor = executor

    async def fetch_tasks(self, query: TaskQuery) -> Outcome[TaskPage]:
        """Fetch one page, keeping any storage error on the outcome."""
        composed = compose(query)
        logger.debug(
            f"Fetching tasks page={query.page} per_page={query.per_page} "
            f"sort={query.sort!r} filters={len(query.filters)}"
        )
        return await self._executor.run(composed)

    async def get_tasks(self, query: TaskQuery) -> TaskPage:
        """Fetch one page; storage failures yield an empty page."""
        return (await self.fetch_tasks(query)).value
