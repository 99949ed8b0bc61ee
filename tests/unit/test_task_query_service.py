"""Tests for TaskQueryService and PaginatedQueryExecutor against SQLite."""

import pytest
from datetime import datetime

from taskboard.domain.models import (
    Combinator,
    DateRange,
    FilterTerm,
    MatchMode,
    TaskPriority,
    TaskQuery,
    TaskStatus,
)
from taskboard.queries.executor import PaginatedQueryExecutor, page_count
from taskboard.services.task_query_service import TaskQueryService
from taskboard.storage.schema import InvalidTaskRow


class TestPageCount:
    """Tests for page_count."""

    @pytest.mark.parametrize(
        "total,per_page,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (15, 10, 2), (30, 7, 5)],
    )
    def test_ceil(self, total, per_page, expected):
        assert page_count(total, per_page) == expected


class TestTaskQueryService:
    """Tests for TaskQueryService."""

    @pytest.fixture
    def service(self, session_factory) -> TaskQueryService:
        return TaskQueryService(PaginatedQueryExecutor(session_factory))

    @pytest.mark.asyncio
    async def test_status_filter_sorted_by_title(self, service, sample_tasks):
        """Two statuses, title ascending, first of two pages."""
        query = TaskQuery(
            page=1,
            per_page=10,
            sort="title.asc",
            filters=[FilterTerm(field="status", raw_value="done,cancelled")],
            combinator=Combinator.AND,
        )

        result = await service.get_tasks(query)

        matching = [
            t for t in sample_tasks
            if t.status in (TaskStatus.DONE, TaskStatus.CANCELLED)
        ]
        assert len(matching) == 12
        expected_titles = sorted(t.title for t in matching)[:10]
        assert [t.title for t in result.rows] == expected_titles
        assert result.page_count == 2

    @pytest.mark.asyncio
    async def test_second_page(self, service):
        query = TaskQuery(
            page=2,
            per_page=10,
            sort="title.asc",
            filters=[FilterTerm(field="status", raw_value="done,cancelled")],
        )

        result = await service.get_tasks(query)

        assert len(result.rows) == 2
        assert result.page_count == 2

    @pytest.mark.asyncio
    async def test_no_filters_matches_every_row(self, service, sample_tasks):
        result = await service.get_tasks(TaskQuery(per_page=100))

        assert len(result.rows) == len(sample_tasks)
        assert result.page_count == 1

    @pytest.mark.asyncio
    async def test_default_order_is_newest_first(self, service, sample_tasks):
        result = await service.get_tasks(TaskQuery(per_page=3))

        newest = sorted(sample_tasks, key=lambda t: t.created_at, reverse=True)[:3]
        assert [t.id for t in result.rows] == [t.id for t in newest]

    @pytest.mark.asyncio
    async def test_unknown_sort_falls_back_to_default(self, service):
        default = await service.get_tasks(TaskQuery(per_page=5))
        unknown = await service.get_tasks(TaskQuery(per_page=5, sort="owner.asc"))

        assert [t.id for t in unknown.rows] == [t.id for t in default.rows]

    @pytest.mark.asyncio
    async def test_and_is_intersection(self, service, sample_tasks):
        query = TaskQuery(
            per_page=100,
            filters=[
                FilterTerm(field="status", raw_value="done"),
                FilterTerm(field="priority", raw_value="high"),
            ],
        )

        result = await service.get_tasks(query)

        expected = {
            t.id for t in sample_tasks
            if t.status is TaskStatus.DONE and t.priority is TaskPriority.HIGH
        }
        assert {t.id for t in result.rows} == expected

    @pytest.mark.asyncio
    async def test_or_is_union(self, service, sample_tasks):
        query = TaskQuery(
            per_page=100,
            filters=[
                FilterTerm(field="status", raw_value="todo"),
                FilterTerm(field="priority", raw_value="high"),
            ],
            combinator=Combinator.OR,
        )

        result = await service.get_tasks(query)

        expected = {
            t.id for t in sample_tasks
            if t.status is TaskStatus.TODO or t.priority is TaskPriority.HIGH
        }
        assert {t.id for t in result.rows} == expected

    @pytest.mark.asyncio
    async def test_title_substring_case_insensitive(self, service):
        query = TaskQuery(filters=[FilterTerm(field="title", raw_value="BUG")])

        result = await service.get_tasks(query)

        assert [t.title for t in result.rows] == ["Fix login bug"]

    @pytest.mark.asyncio
    async def test_title_starts_with_operator(self, service):
        query = TaskQuery(
            per_page=100,
            sort="title.asc",
            filters=[FilterTerm(field="title", raw_value="r~startsWith")],
        )

        result = await service.get_tasks(query)

        assert [t.title for t in result.rows] == [
            "Refactor cache",
            "Review PR",
            "Rotate keys",
        ]

    @pytest.mark.asyncio
    async def test_status_not_equal(self, service, sample_tasks):
        query = TaskQuery(
            per_page=100,
            filters=[
                FilterTerm(
                    field="status",
                    raw_value="done,cancelled",
                    match_mode=MatchMode.NOT_EXACT,
                )
            ],
        )

        result = await service.get_tasks(query)

        assert {t.status for t in result.rows} == {
            TaskStatus.TODO,
            TaskStatus.IN_PROGRESS,
        }
        assert len(result.rows) == 3

    @pytest.mark.asyncio
    async def test_unknown_field_is_ignored(self, service, sample_tasks):
        query = TaskQuery(
            per_page=100,
            filters=[FilterTerm(field="assignee", raw_value="alice")],
        )

        result = await service.get_tasks(query)

        assert len(result.rows) == len(sample_tasks)

    @pytest.mark.asyncio
    async def test_date_range_is_inclusive(self, service, sample_tasks):
        # sample tasks are created one day apart starting 2024-01-01 09:00
        query = TaskQuery(
            per_page=100,
            date_range=DateRange(
                start=datetime(2024, 1, 3, 9, 0),
                end=datetime(2024, 1, 5, 9, 0),
            ),
        )

        result = await service.get_tasks(query)

        assert sorted(t.id for t in result.rows) == ["task-002", "task-003", "task-004"]

    @pytest.mark.asyncio
    async def test_no_matches_yields_zero_pages(self, service):
        query = TaskQuery(filters=[FilterTerm(field="title", raw_value="nothing like this")])

        outcome = await service.fetch_tasks(query)

        assert outcome.ok
        assert outcome.value.rows == []
        assert outcome.value.page_count == 0

    @pytest.mark.asyncio
    async def test_rows_are_domain_tasks(self, service):
        result = await service.get_tasks(TaskQuery(per_page=1, sort="id.asc"))

        task = result.rows[0]
        assert task.id == "task-000"
        assert task.code == "TASK-000"
        assert task.status is TaskStatus.DONE
        assert task.priority is TaskPriority.HIGH
        assert isinstance(task.created_at, datetime)


class TestStorageFailure:
    """Storage errors degrade to an empty page."""

    @pytest.mark.asyncio
    async def test_get_tasks_returns_empty_page(self, broken_session_factory):
        service = TaskQueryService(PaginatedQueryExecutor(broken_session_factory))

        result = await service.get_tasks(TaskQuery())

        assert result.rows == []
        assert result.page_count == 0

    @pytest.mark.asyncio
    async def test_fetch_tasks_exposes_error(self, broken_session_factory):
        service = TaskQueryService(PaginatedQueryExecutor(broken_session_factory))

        outcome = await service.fetch_tasks(TaskQuery())

        assert not outcome.ok
        assert outcome.error is not None
        assert outcome.value.rows == []

    @pytest.mark.asyncio
    async def test_unknown_stored_status_degrades(self, session_factory, insert_raw_row):
        insert_raw_row(status="archived")
        service = TaskQueryService(PaginatedQueryExecutor(session_factory))

        outcome = await service.fetch_tasks(TaskQuery(page=2))

        assert isinstance(outcome.error, InvalidTaskRow)
        assert outcome.value.rows == []
        assert outcome.value.page_count == 0
        assert (await service.get_tasks(TaskQuery(page=2))).rows == []

    @pytest.mark.asyncio
    async def test_unknown_row_outside_page_is_not_read(
        self, session_factory, insert_raw_row
    ):
        """Only rows on the requested page are converted."""
        insert_raw_row(priority="critical")
        service = TaskQueryService(PaginatedQueryExecutor(session_factory))

        result = await service.get_tasks(TaskQuery())

        assert len(result.rows) == 10
        assert result.page_count == 2
