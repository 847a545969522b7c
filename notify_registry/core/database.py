"""
Database engine, session factory and transaction units.

The engine and session factory are created once at process start and handed
to callers explicitly; no module-level engine is kept.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

import notify_registry.models  # noqa: F401
from notify_registry.core.config import Settings
from notify_registry.core.errors import store_errors


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # Leave BEGIN to SQLAlchemy so SAVEPOINTs nest inside the outer transaction
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def make_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine with dialect-specific configuration.

    - PostgreSQL (asyncpg): pooled, pre-ping
    - SQLite (aiosqlite): foreign keys on, explicit BEGIN so nested units
      really are savepoints of the caller's transaction
    """
    kwargs: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if settings.database_url.startswith("postgresql"):
        kwargs["pool_size"] = settings.db_pool_size
        kwargs["max_overflow"] = settings.db_max_overflow

    engine = create_async_engine(settings.database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _configure_sqlite_connection)
        event.listen(engine.sync_engine, "begin", _begin_sqlite_transaction)
    return engine


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (development and tests only; use migrations in production)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run the block as one atomic unit.

    Begins and commits a transaction when the session has none open; inside a
    caller-owned transaction the block runs in a SAVEPOINT and the caller
    commits. Any exception rolls the unit back and surfaces as a RegistryError.
    """
    with store_errors():
        if session.in_transaction():
            async with session.begin_nested():
                yield session
        else:
            async with session.begin():
                yield session


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session for use outside of a request lifecycle (workers, CLI)."""
    async with factory() as session:
        yield session


def upsert_insert(session: AsyncSession, table):
    """Dialect-specific INSERT supporting ON CONFLICT for the session's engine."""
    if session.bind.dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)
