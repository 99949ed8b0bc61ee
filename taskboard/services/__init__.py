"""Service layer implementations."""

from .task_query_service import TaskQueryService
from .aggregate_service import AggregateCounter

__all__ = [
    "TaskQueryService",
    "AggregateCounter",
]
