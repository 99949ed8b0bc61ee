"""SQLAlchemy mapping of the tasks table."""

from sqlalchemy import Column, DateTime, Index, String
from sqlalchemy.orm import declarative_base

from taskboard.domain.models import Task, TaskPriority, TaskStatus

Base = declarative_base()


class InvalidTaskRow(ValueError):
    """A stored row holds a status or priority this layer does not know."""


class TaskRow(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    code = Column(String, nullable=False, unique=True)
    title = Column(String)
    status = Column(String, nullable=False, default=TaskStatus.TODO.value)
    priority = Column(String, nullable=False, default=TaskPriority.LOW.value)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime)

    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_priority", "priority"),
        Index("ix_tasks_created_at", "created_at"),
    )

    def to_domain(self) -> Task:
        try:
            status = TaskStatus(self.status)
            priority = TaskPriority(self.priority)
        except ValueError as e:
            raise InvalidTaskRow(f"Task {self.id}: {e}") from e
        return Task(
            id=self.id,
            code=self.code,
            title=self.title or "",
            status=status,
            priority=priority,
            created_at=self.created_at,
            updated_at=self.updated_at or self.created_at,
        )

    @classmethod
    def from_domain(cls, task: Task) -> "TaskRow":
        return cls(
            id=task.id,
            code=task.code,
            title=task.title,
            status=task.status.value,
            priority=task.priority.value,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
