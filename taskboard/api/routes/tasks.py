"""Task query and aggregate routes."""

from typing import Optional
from datetime import datetime
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ...domain.models import Task, TaskPriority, TaskQuery, TaskStatus
from ...services.aggregate_service import AggregateCounter
from ...services.task_query_service import TaskQueryService
from ...container import get_container

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskResponse(BaseModel):
    """Task response model."""

    id: str
    code: str
    title: str
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime


class TaskPageResponse(BaseModel):
    """One page of tasks."""

    rows: list[TaskResponse]
    page_count: int


class CountResponse(BaseModel):
    """Scalar aggregate count."""

    value: str
    count: int


class InvalidateRequest(BaseModel):
    """Cache invalidation request model."""

    tags: list[str] = Field(default_factory=list, min_length=1)


class InvalidateResponse(BaseModel):
    """Cache invalidation result."""

    invalidated: int


def get_task_query_service() -> TaskQueryService:
    """Get TaskQueryService from container."""
    return get_container().task_query_service


def get_aggregate_counter() -> AggregateCounter:
    """Get AggregateCounter from container."""
    return get_container().aggregate_counter


def task_to_response(task: Task) -> TaskResponse:
    """Convert Task to TaskResponse."""
    return TaskResponse(
        id=task.id,
        code=task.code,
        title=task.title,
        status=task.status.value,
        priority=task.priority.value,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


@router.get("", response_model=TaskPageResponse)
async def list_tasks(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    sort: Optional[str] = Query(None, description="Sort as field.direction, e.g. title.asc"),
    title: Optional[str] = Query(None, description="Substring filter on title"),
    status: Optional[str] = Query(None, description="Statuses, comma-separated"),
    priority: Optional[str] = Query(None, description="Priorities, comma-separated"),
    operator: Optional[str] = Query(None, description="Combine filters with 'and' or 'or'"),
    date_from: Optional[str] = Query(None, alias="from", description="Created on or after"),
    date_to: Optional[str] = Query(None, alias="to", description="Created on or before"),
) -> TaskPageResponse:
    """List tasks with filters, sorting and pagination."""
    query_settings = get_container().settings.query
    if per_page is None:
        per_page = query_settings.default_per_page
    per_page = min(per_page, query_settings.max_per_page)

    query = TaskQuery.from_params(
        page=page,
        per_page=per_page,
        sort=sort,
        title=title,
        status=status,
        priority=priority,
        operator=operator,
        date_from=date_from,
        date_to=date_to,
    )
    result = await get_task_query_service().get_tasks(query)

    return TaskPageResponse(
        rows=[task_to_response(t) for t in result.rows],
        page_count=result.page_count,
    )


# Static routes must come before dynamic routes
@router.get("/counts/status", response_model=dict[str, int])
async def get_status_counts() -> dict[str, int]:
    """Task counts grouped by status."""
    counts = await get_aggregate_counter().status_counts()
    return {status.value: count for status, count in counts.items()}


@router.get("/counts/priority", response_model=dict[str, int])
async def get_priority_counts() -> dict[str, int]:
    """Task counts grouped by priority."""
    counts = await get_aggregate_counter().priority_counts()
    return {priority.value: count for priority, count in counts.items()}


@router.post("/cache/invalidate", response_model=InvalidateResponse)
async def invalidate_cache(request: InvalidateRequest) -> InvalidateResponse:
    """Invalidate cached aggregates by tag."""
    removed = await get_aggregate_counter().invalidate_many(request.tags)
    return InvalidateResponse(invalidated=removed)


# Dynamic routes must come after static routes
@router.get("/counts/status/{status}", response_model=CountResponse)
async def get_count_by_status(status: str) -> CountResponse:
    """Number of tasks with the given status."""
    try:
        task_status = TaskStatus(status)
    except ValueError:
        raise HTTPException(400, f"Invalid status: {status}")

    count = await get_aggregate_counter().count_by_status(task_status)
    return CountResponse(value=task_status.value, count=count)


@router.get("/counts/priority/{priority}", response_model=CountResponse)
async def get_count_by_priority(priority: str) -> CountResponse:
    """Number of tasks with the given priority."""
    try:
        task_priority = TaskPriority(priority)
    except ValueError:
        raise HTTPException(400, f"Invalid priority: {priority}")

    count = await get_aggregate_counter().count_by_priority(task_priority)
    return CountResponse(value=task_priority.value, count=count)
