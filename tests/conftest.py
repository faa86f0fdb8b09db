"""Pytest fixtures for the database validations tests."""

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from db_validations.db import configure_sqlite_engine
from db_validations.validations import RecordPersister

from .models import registry


@pytest.fixture()
def test_database_url(tmp_path) -> str:
    """File-backed SQLite database, one per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'validations-test.db'}"


@pytest_asyncio.fixture()
async def test_engine(test_database_url: str) -> AsyncIterator[AsyncEngine]:
    """Engine with savepoint support and every test table created."""
    engine = configure_sqlite_engine(
        create_async_engine(
            test_database_url,
            connect_args={"check_same_thread": False},
        ),
        enforce_foreign_keys=True,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session


@pytest.fixture()
def persister(db_session: AsyncSession) -> RecordPersister:
    return RecordPersister(db_session, registry)


@pytest.fixture()
def executed_statements(test_engine: AsyncEngine) -> Iterator[list[str]]:
    """Every SQL statement sent to the database during the test."""
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany) -> None:
        statements.append(statement)

    event.listen(test_engine.sync_engine, "before_cursor_execute", _record)
    yield statements
    event.remove(test_engine.sync_engine, "before_cursor_execute", _record)
