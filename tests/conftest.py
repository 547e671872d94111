"""
Pytest configuration and shared fixtures.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.api.main import create_app, lifespan
from jobqueue.config import Settings
from jobqueue.core.queue import JobQueue
from jobqueue.db import Database


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh file-backed SQLite database per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'jobqueue.sqlite'}"


@pytest.fixture
def test_settings(database_url: str) -> Settings:
    """Create test settings."""
    return Settings(
        database_url=database_url,
        database_busy_timeout_seconds=30.0,
        log_level="INFO",
        log_format="console",
        tracing_enabled=False,
        claim_max_retries=10,
        worker_name="test-worker",
        worker_poll_interval_seconds=0.05,
    )


@pytest_asyncio.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database]:
    """Connected storage handle with the schema created."""
    database = Database(test_settings)
    await database.connect()

    yield database

    await database.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession]:
    """Create a database session for tests. Commits on exit."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def queue(database: Database, test_settings: Settings) -> JobQueue:
    """Job queue over the test database."""
    return JobQueue(database, test_settings)


@pytest_asyncio.fixture
async def app(test_settings: Settings) -> AsyncGenerator[FastAPI]:
    """Create a FastAPI app for testing with its lifespan running."""
    app = create_app(test_settings)

    # ASGITransport does not send lifespan events
    async with lifespan(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
