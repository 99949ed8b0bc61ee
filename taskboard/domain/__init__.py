"""Domain models and protocols."""

from .models import (
    Task,
    TaskStatus,
    TaskPriority,
    MatchMode,
    Combinator,
    FilterTerm,
    DateRange,
    TaskQuery,
    TaskPage,
    Outcome,
)
from .protocols import (
    AggregateCache,
    TaskReader,
    TaskCounter,
)

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "MatchMode",
    "Combinator",
    "FilterTerm",
    "DateRange",
    "TaskQuery",
    "TaskPage",
    "Outcome",
    "AggregateCache",
    "TaskReader",
    "TaskCounter",
]
