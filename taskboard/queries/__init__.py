"""Predicate building, query composition and paginated execution."""

from .predicates import filter_column, date_bounds, parse_operator, split_candidates
from .composer import (
    ComposedQuery,
    FILTERABLE_COLUMNS,
    SORTABLE_COLUMNS,
    build_where,
    combine,
    compose,
    page_offset,
    resolve_sort,
)
from .executor import PaginatedQueryExecutor, page_count

__all__ = [
    "filter_column",
    "date_bounds",
    "parse_operator",
    "split_candidates",
    "ComposedQuery",
    "FILTERABLE_COLUMNS",
    "SORTABLE_COLUMNS",
    "build_where",
    "combine",
    "compose",
    "page_offset",
    "resolve_sort",
    "PaginatedQueryExecutor",
    "page_count",
]
