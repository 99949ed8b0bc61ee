"""Domain models for the task query layer."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskStatus(Enum):
    """Task status values."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CANCELLED = "cancelled"


class TaskPriority(Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MatchMode(Enum):
    """How a filter term is compared against its column."""

    EXACT = "exact"
    NOT_EXACT = "not_exact"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


class Combinator(Enum):
    """AND/OR policy for merging predicates."""

    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Combinator":
        """Parse a combinator, defaulting to AND when unset or unrecognized."""
        if isinstance(value, Combinator):
            return value
        if value and value.strip().lower() == "or":
            return cls.OR
        return cls.AND


@dataclass
class Task:
    """Task entity as read from storage."""

    id: str
    code: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class FilterTerm:
    """A single field/value filter.

    ``raw_value`` may carry a ``~operator`` suffix (``"bug~startsWith"``) which
    is used when ``match_mode`` is not given explicitly.
    """

    field: str
    raw_value: Optional[str]
    match_mode: Optional[MatchMode] = None
    case_sensitive: bool = False


def _parse_datetime(value: Optional[str], bound: str) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable '{bound}' date: {value!r}")
        return None


@dataclass(frozen=True)
class DateRange:
    """Inclusive creation-time bounds."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def parse(cls, start: Optional[str], end: Optional[str]) -> "DateRange":
        """Build a range from ISO 8601 strings, dropping bounds that fail to parse."""
        return cls(
            start=_parse_datetime(start, "from"),
            end=_parse_datetime(end, "to"),
        )

    def is_empty(self) -> bool:
        return self.start is None and self.end is None


@dataclass
class TaskQuery:
    """Filtered, sorted, paginated task query request."""

    page: int = 1
    per_page: int = 10
    sort: Optional[str] = None
    filters: list[FilterTerm] = field(default_factory=list)
    combinator: Combinator = Combinator.AND
    date_range: DateRange = field(default_factory=DateRange)

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {self.per_page}")

    @classmethod
    def from_params(
        cls,
        *,
        page: int = 1,
        per_page: int = 10,
        sort: Optional[str] = None,
        title: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        operator: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> "TaskQuery":
        """Build a query from the flat parameter set used by the API and CLI."""
        filters = [
            FilterTerm(field=name, raw_value=value)
            for name, value in (
                ("title", title),
                ("status", status),
                ("priority", priority),
            )
            if value
        ]
        return cls(
            page=page,
            per_page=per_page,
            sort=sort,
            filters=filters,
            combinator=Combinator.parse(operator),
            date_range=DateRange.parse(date_from, date_to),
        )


@dataclass
class TaskPage:
    """One page of query results."""

    rows: list[Task] = field(default_factory=list)
    page_count: int = 0


@dataclass
class Outcome(Generic[T]):
    """Result of a storage read, keeping the failure next to the fallback value."""

    value: T
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None
