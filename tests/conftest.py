"""Shared pytest fixtures."""

import pytest
from datetime import datetime, timedelta
from pathlib import Path

from sqlalchemy import create_engine, insert
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from taskboard.domain.models import Task, TaskPriority, TaskStatus
from taskboard.storage.database import get_engine, get_session_factory
from taskboard.storage.schema import Base, TaskRow

BASE_TIME = datetime(2024, 1, 1, 9, 0, 0)

TITLES = [
    "Write docs",
    "Fix login bug",
    "Add search",
    "Refactor cache",
    "Update deps",
    "Review PR",
    "Plan sprint",
    "Deploy staging",
    "Benchmark queries",
    "Triage inbox",
    "Clean logs",
    "Rotate keys",
    "Draft roadmap",
    "Audit access",
    "Migrate schema",
]

# 7 done, 5 cancelled, 2 todo, 1 in progress
STATUSES = (
    [TaskStatus.DONE] * 7
    + [TaskStatus.CANCELLED] * 5
    + [TaskStatus.TODO] * 2
    + [TaskStatus.IN_PROGRESS]
)

# 5 high, 5 low, 5 medium, no urgent
PRIORITIES = [TaskPriority.HIGH, TaskPriority.LOW, TaskPriority.MEDIUM]


def make_task(
    index: int,
    title: str,
    status: TaskStatus = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.LOW,
) -> Task:
    created = BASE_TIME + timedelta(days=index)
    return Task(
        id=f"task-{index:03d}",
        code=f"TASK-{index:03d}",
        title=title,
        status=status,
        priority=priority,
        created_at=created,
        updated_at=created,
    )


def build_sample_tasks() -> list[Task]:
    return [
        make_task(i, title, STATUSES[i], PRIORITIES[i % 3])
        for i, title in enumerate(TITLES)
    ]


def seed_database(db_path: Path, tasks: list[Task]) -> None:
    """Create the schema and insert tasks through a synchronous engine."""
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all([TaskRow.from_domain(t) for t in tasks])
        session.commit()
    engine.dispose()


def async_session_factory(db_path: Path):
    engine = get_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    return get_session_factory(engine)


class CountingSessionFactory:
    """Wraps a session factory and counts storage round-trips."""

    def __init__(self, factory) -> None:
        self._factory = factory
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self._factory()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_tasks() -> list[Task]:
    return build_sample_tasks()


@pytest.fixture
def db_path(tmp_path, sample_tasks) -> Path:
    """SQLite file seeded with the sample tasks."""
    path = tmp_path / "tasks.db"
    seed_database(path, sample_tasks)
    return path


@pytest.fixture
def session_factory(db_path):
    return async_session_factory(db_path)


@pytest.fixture
def counting_session_factory(session_factory) -> CountingSessionFactory:
    return CountingSessionFactory(session_factory)


@pytest.fixture
def broken_session_factory(tmp_path):
    """Session factory for a database without the tasks table."""
    return async_session_factory(tmp_path / "missing-schema.db")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def task_factory():
    """Build a Task from an index and title."""
    return make_task


@pytest.fixture
def seeded_session_factory(tmp_path):
    """Seed a fresh database with the given tasks and return its session factory."""
    counter = 0

    def _seed(tasks: list[Task]):
        nonlocal counter
        counter += 1
        path = tmp_path / f"seeded-{counter}.db"
        seed_database(path, tasks)
        return async_session_factory(path)

    return _seed


@pytest.fixture
def counting_wrapper():
    """Wrap any session factory in a round-trip counter."""
    return CountingSessionFactory


@pytest.fixture
def insert_raw_row(db_path):
    """Insert a row into the sample database without domain validation."""

    def _insert(**values) -> None:
        row = {
            "id": "task-900",
            "code": "TASK-900",
            "title": "Legacy import",
            "status": TaskStatus.TODO.value,
            "priority": TaskPriority.LOW.value,
            "created_at": BASE_TIME - timedelta(days=30),
        }
        row.update(values)
        engine = create_engine(f"sqlite:///{db_path}", future=True)
        with engine.begin() as conn:
            conn.execute(insert(TaskRow.__table__).values(**row))
        engine.dispose()

    return _insert
