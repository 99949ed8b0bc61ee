"""Compose filter terms, sort order and pagination into one query plan."""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from taskboard.domain.models import Combinator, FilterTerm, TaskQuery
from taskboard.storage.schema import TaskRow

from .predicates import date_bounds, filter_column

logger = logging.getLogger(__name__)

# field name -> (column, enumerated)
FILTERABLE_COLUMNS = {
    "title": (TaskRow.title, False),
    "code": (TaskRow.code, False),
    "status": (TaskRow.status, True),
    "priority": (TaskRow.priority, True),
}

SORTABLE_COLUMNS = frozenset(
    {"id", "code", "title", "status", "priority", "created_at", "updated_at"}
)

SORT_ALIASES = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SORT_SEPARATOR = "."


@dataclass
class ComposedQuery:
    """Everything the executor needs to run one page query."""

    where: Optional[ColumnElement]
    order_by: list
    limit: int
    offset: int


def combine(
    predicates: Iterable[Optional[ColumnElement]],
    combinator: Combinator = Combinator.AND,
) -> Optional[ColumnElement]:
    """Merge the present predicates; None means no filter at all."""
    present = [p for p in predicates if p is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    if combinator is Combinator.OR:
        return or_(*present)
    return and_(*present)


def default_order() -> list:
    return [TaskRow.created_at.desc(), TaskRow.id.desc()]


def resolve_sort(sort: Optional[str]) -> list:
    """Turn ``"field.direction"`` into ORDER BY clauses.

    Unknown or missing fields fall back to newest first. An ``id DESC``
    tie-break keeps pages stable.
    """
    if not sort:
        return default_order()

    parts = [p for p in sort.split(SORT_SEPARATOR) if p]
    if not parts:
        return default_order()

    name = SORT_ALIASES.get(parts[0], parts[0])
    if name not in SORTABLE_COLUMNS:
        logger.debug(f"Unknown sort column '{parts[0]}', using default order")
        return default_order()

    column = getattr(TaskRow, name)
    direction = parts[1].lower() if len(parts) > 1 else "desc"
    clause = column.asc() if direction == "asc" else column.desc()
    if name == "id":
        return [clause]
    return [clause, TaskRow.id.desc()]


def page_offset(page: int, per_page: int) -> int:
    return max(0, (page - 1) * per_page)


def term_predicate(term: FilterTerm) -> Optional[ColumnElement]:
    """Predicate for one filter term, None for unknown fields or empty values."""
    column_def = FILTERABLE_COLUMNS.get(term.field)
    if column_def is None:
        logger.debug(f"Ignoring filter on unknown field '{term.field}'")
        return None
    column, selectable = column_def
    return filter_column(
        column,
        term.raw_value,
        selectable=selectable,
        match_mode=term.match_mode,
        case_sensitive=term.case_sensitive,
    )


def build_where(query: TaskQuery) -> Optional[ColumnElement]:
    predicates = [term_predicate(term) for term in query.filters]
    predicates.extend(date_bounds(TaskRow.created_at, query.date_range))
    return combine(predicates, query.combinator)


def compose(query: TaskQuery) -> ComposedQuery:
    return ComposedQuery(
        where=build_where(query),
        order_by=resolve_sort(query.sort),
        limit=query.per_page,
        offset=page_offset(query.page, query.per_page),
    )
