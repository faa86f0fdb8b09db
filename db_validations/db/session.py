"""Async engine and session factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.config import settings


def configure_sqlite_engine(engine: AsyncEngine, *, enforce_foreign_keys: bool | None = None) -> AsyncEngine:
    """Give a SQLite engine working SAVEPOINTs and enforced foreign keys.

    The sqlite3 driver issues its own BEGIN lazily, which breaks nested
    transactions; driver autocommit is switched off and SQLAlchemy's begin
    emits BEGIN explicitly instead.
    """
    if engine.dialect.name != "sqlite":
        return engine
    if enforce_foreign_keys is None:
        enforce_foreign_keys = settings.sqlite_enforce_foreign_keys

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        if enforce_foreign_keys:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


def create_engine(database_url: str | None = None, **kwargs: Any) -> AsyncEngine:
    """Create an engine for the configured database URL."""
    engine = create_async_engine(database_url or settings.database_url, **kwargs)
    return configure_sqlite_engine(engine)


@lru_cache
def get_engine() -> AsyncEngine:
    """Engine for ``settings.database_url``, created on first use."""
    return create_engine()


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(get_engine(), expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with get_session_maker()() as session:
        yield session
