"""Translate single filter values into SQLAlchemy boolean expressions.

A raw filter value may name several candidates for enumerated columns
(``"done,cancelled"``) and may carry an operator suffix after ``~``
(``"bug~startsWith"``). Empty values never produce an expression.
"""

import re
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.sql.elements import ColumnElement

from taskboard.domain.models import DateRange, MatchMode

OPERATOR_SEPARATOR = "~"

OPERATORS: dict[str, MatchMode] = {
    "eq": MatchMode.EXACT,
    "notEq": MatchMode.NOT_EXACT,
    "ilike": MatchMode.CONTAINS,
    "notIlike": MatchMode.NOT_CONTAINS,
    "startsWith": MatchMode.STARTS_WITH,
    "endsWith": MatchMode.ENDS_WITH,
    "isNull": MatchMode.IS_NULL,
    "isNotNull": MatchMode.IS_NOT_NULL,
}

_CANDIDATE_SPLIT = re.compile(r"[,.]")


def parse_operator(raw: str) -> tuple[str, Optional[MatchMode]]:
    """Split ``"value~op"`` into the value and its match mode.

    An unknown operator is dropped and reported as None so the column's
    default mode applies.
    """
    value, sep, operator = raw.rpartition(OPERATOR_SEPARATOR)
    if not sep:
        return raw, None
    return value, OPERATORS.get(operator)


def split_candidates(value: str) -> list[str]:
    """Split a multi-select value on ``,`` or ``.``, dropping blanks."""
    return [c.strip() for c in _CANDIDATE_SPLIT.split(value) if c.strip()]


def _equals_any(column, candidates: list[str]) -> ColumnElement:
    if len(candidates) == 1:
        return column == candidates[0]
    return or_(*(column == c for c in candidates))


def _equals_none(column, candidates: list[str]) -> ColumnElement:
    if len(candidates) == 1:
        return column != candidates[0]
    return and_(*(column != c for c in candidates))


def _text_match(
    column, text: str, mode: MatchMode, case_sensitive: bool
) -> ColumnElement:
    if mode is MatchMode.EXACT:
        if case_sensitive:
            return column == text
        return func.lower(column) == text.lower()
    if mode is MatchMode.NOT_EXACT:
        if case_sensitive:
            return column != text
        return func.lower(column) != text.lower()
    if mode is MatchMode.STARTS_WITH:
        if case_sensitive:
            return column.startswith(text, autoescape=True)
        return column.istartswith(text, autoescape=True)
    if mode is MatchMode.ENDS_WITH:
        if case_sensitive:
            return column.endswith(text, autoescape=True)
        return column.iendswith(text, autoescape=True)

    if case_sensitive:
        contains = column.contains(text, autoescape=True)
    else:
        contains = column.icontains(text, autoescape=True)
    if mode is MatchMode.NOT_CONTAINS:
        return ~contains
    return contains


def filter_column(
    column,
    value: Optional[str],
    *,
    selectable: bool = False,
    match_mode: Optional[MatchMode] = None,
    case_sensitive: bool = False,
) -> Optional[ColumnElement]:
    """Build a predicate for one column, or None when there is nothing to filter.

    Args:
        column: Column to compare
        value: Raw filter value, optionally suffixed with ``~operator``
        selectable: True for enumerated columns (exact match per candidate)
        match_mode: Explicit mode, overrides any operator suffix
        case_sensitive: Use LIKE instead of ILIKE semantics for text matches

    Returns:
        Boolean expression or None
    """
    if value is None:
        return None

    text, suffix_mode = parse_operator(str(value))
    mode = match_mode or suffix_mode
    if mode is None:
        mode = MatchMode.EXACT if selectable else MatchMode.CONTAINS

    if mode is MatchMode.IS_NULL:
        return column.is_(None)
    if mode is MatchMode.IS_NOT_NULL:
        return column.is_not(None)

    text = text.strip()
    if not text:
        return None

    if selectable and mode in (MatchMode.EXACT, MatchMode.NOT_EXACT):
        candidates = split_candidates(text)
        if not candidates:
            return None
        if mode is MatchMode.NOT_EXACT:
            return _equals_none(column, candidates)
        return _equals_any(column, candidates)

    return _text_match(column, text, mode, case_sensitive)


def date_bounds(
    column, date_range: DateRange
) -> list[Optional[ColumnElement]]:
    """Inclusive lower/upper bound expressions; absent bounds are None."""
    return [
        column >= date_range.start if date_range.start is not None else None,
        column <= date_range.end if date_range.end is not None else None,
    ]
