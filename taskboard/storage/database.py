"""Async engine and session helpers."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .schema import Base

SessionFactory = Callable[[], AsyncSession]


def get_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """Create an async engine for the given database URL."""
    return create_async_engine(url, echo=echo, **kwargs)


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Get a session factory bound to the engine (callers must close sessions)."""
    return async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the tasks table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def read_transaction(
    session_factory: SessionFactory,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Open a session with a transaction spanning every statement in the block.

    Usage:
        async with read_transaction(factory) as session:
            rows = await session.execute(...)
            total = await session.execute(...)
    """
    async with session_factory() as session:
        async with session.begin():
            yield session
