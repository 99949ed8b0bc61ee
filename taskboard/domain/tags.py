"""Cache keys and invalidation tags for aggregate counts."""

from typing import Iterable

from .models import TaskPriority, TaskStatus

AGGREGATE_TAG = "aggregate-invalidation"
STATUS_COUNTS_TAG = "status-counts"
PRIORITY_COUNTS_TAG = "priority-counts"

STATUS_COUNTS_KEY = "task-status-counts"
PRIORITY_COUNTS_KEY = "task-priority-counts"


def status_tag(status: TaskStatus) -> str:
    return f"status:{status.value}"


def priority_tag(priority: TaskPriority) -> str:
    return f"priority:{priority.value}"


def status_count_key(status: TaskStatus) -> str:
    return f"task-status-{status.value}"


def priority_count_key(priority: TaskPriority) -> str:
    return f"task-priority-{priority.value}"


def tags_for_task_change(
    statuses: Iterable[TaskStatus] = (),
    priorities: Iterable[TaskPriority] = (),
) -> set[str]:
    """Tags a write path should invalidate after touching tasks with these values.

    Pass both the old and the new value when a task moves between statuses or
    priorities.
    """
    tags: set[str] = set()
    for status in statuses:
        tags.add(status_tag(status))
        tags.add(STATUS_COUNTS_TAG)
    for priority in priorities:
        tags.add(priority_tag(priority))
        tags.add(PRIORITY_COUNTS_TAG)
    return tags
