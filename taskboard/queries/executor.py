"""Run a composed page query against storage."""

import logging
import math
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from taskboard.domain.models import Outcome, TaskPage
from taskboard.storage.database import SessionFactory, read_transaction
from taskboard.storage.schema import InvalidTaskRow, TaskRow

from .composer import ComposedQuery

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (SQLAlchemyError, OSError, InvalidTaskRow)


def page_count(total: int, per_page: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / per_page)


class PaginatedQueryExecutor:
    """Fetch one page of rows and the matching total in a single transaction."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def fetch(
        self,
        where: Optional[ColumnElement],
        order_by: list,
        limit: int,
        offset: int,
    ) -> Outcome[TaskPage]:
        """Fetch rows and page count.

        Storage failures are logged and returned as an empty page with the
        exception attached.
        """
        rows_stmt = select(TaskRow).order_by(*order_by).limit(limit).offset(offset)
        count_stmt = select(func.count()).select_from(TaskRow)
        if where is not None:
            rows_stmt = rows_stmt.where(where)
            count_stmt = count_stmt.where(where)

        try:
            async with read_transaction(self._session_factory) as session:
                rows = (await session.execute(rows_stmt)).scalars().all()
                total = (await session.execute(count_stmt)).scalar_one()
                tasks = [row.to_domain() for row in rows]
        except STORAGE_ERRORS as e:
            logger.warning(f"Task page query failed: {e}", exc_info=True)
            return Outcome(TaskPage(rows=[], page_count=0), error=e)

        return Outcome(TaskPage(rows=tasks, page_count=page_count(total, limit)))

    async def run(self, composed: ComposedQuery) -> Outcome[TaskPage]:
        return await self.fetch(
            composed.where, composed.order_by, composed.limit, composed.offset
        )
