"""
Database connection management.
Handles async SQLAlchemy engine and session creation.

The engine lives on a Database handle that is created at process start,
passed explicitly to every service, and disposed at shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import Connection, event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from jobqueue.config import Settings
from jobqueue.db.models import Base

logger = logging.getLogger(__name__)


def _on_sqlite_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # Hand BEGIN over to _begin_sqlite_immediate
    dbapi_connection.isolation_level = None

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_immediate(conn: Connection) -> None:
    # Take the write lock at the first statement so reads and the writes
    # that depend on them form one transaction
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async database engine for the configured URL.

    SQLite gets one connection per session (NullPool) and a busy timeout so
    concurrent writers wait for the lock instead of failing. Every SQLite
    transaction starts with BEGIN IMMEDIATE, so a session holds the write
    lock from its first query until it commits.

    SQL statements are logged through the "sqlalchemy.engine" logger, whose
    level setup_logging derives from log_level.

    Args:
        settings: Application settings.

    Returns:
        AsyncEngine: The SQLAlchemy async engine instance.
    """
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.database_url,
            poolclass=NullPool,
            connect_args={"timeout": settings.database_busy_timeout_seconds},
        )
        event.listen(engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(engine.sync_engine, "begin", _begin_sqlite_immediate)
        return engine

    return create_async_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
    )


class Database:
    """
    Process-wide storage handle.

    Call connect() on startup and dispose() on shutdown. Services receive
    the handle in their constructor and open one session per operation.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call connect() first.")
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """
        Create the engine and session factory.
        Creates missing tables when database_create_schema is set.
        """
        if self._engine is not None:
            return

        self._engine = create_engine(self._settings)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        if self._settings.database_create_schema:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("Database connection initialized")

    async def dispose(self) -> None:
        """Close all connections held by the engine."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession]:
        """
        Open a session whose transaction commits on exit.

        Yields:
            AsyncSession: An async database session.

        Raises:
            RuntimeError: If the database is not connected.
        """
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call connect() first.")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> bool:
        """Check that the database answers a trivial query."""
        async with self.session() as session:
            await session.execute(text("SELECT 1"))
        return True
