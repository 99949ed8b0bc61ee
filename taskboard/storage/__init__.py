"""Relational storage mapping and session helpers."""

from .schema import Base, InvalidTaskRow, TaskRow
from .database import (
    SessionFactory,
    create_schema,
    get_engine,
    get_session_factory,
    read_transaction,
)

__all__ = [
    "Base",
    "InvalidTaskRow",
    "TaskRow",
    "SessionFactory",
    "create_schema",
    "get_engine",
    "get_session_factory",
    "read_transaction",
]
