"""Shared SQLAlchemy base, engine lifecycle and session helpers.

Postgres (asyncpg) in production; tests point ``init_db`` at a SQLite file
through aiosqlite, which takes no connection-pool options.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cofounder.core.config import get_settings


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def engine_options(url: str) -> dict[str, Any]:
    """Driver-specific create_async_engine keyword arguments."""
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


async def init_db(url: str | None = None) -> None:
    """Create the engine and session factory, then create missing tables.

    A second call is a no-op while an engine is active.
    """
    global _engine, _session_factory

    if _engine is not None:
        return

    settings = get_settings()
    db_url = url or settings.database_url

    _engine = create_async_engine(db_url, echo=settings.debug, **engine_options(db_url))
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    import cofounder.db.models  # noqa: F401

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the configured session factory.

    Raises RuntimeError if init_db() has not been called.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """One AsyncSession for a unit of work; services commit explicitly.

    Usage::

        async with session_scope() as session:
            idea = await IdeaService().get_idea(session, user_id, idea_id)
    """
    async with get_session_factory()() as session:
        yield session
