"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobqueue import __version__
from jobqueue.api.routes import (
    health_router,
    jobs_router,
    log_messages_router,
    workers_router,
)
from jobqueue.config import Settings, get_settings
from jobqueue.core.queue import JobQueue
from jobqueue.db import Database
from jobqueue.observability.logging import setup_logging
from jobqueue.observability.metrics import setup_metrics
from jobqueue.observability.tracing import (
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_tracing,
    shutdown_tracing,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Opens the storage handle on startup, builds the job queue on top of
    it, and closes the handle on shutdown.
    """
    settings: Settings = app.state.settings

    # Startup
    setup_logging(settings)
    metrics = setup_metrics()

    database = Database(settings)
    await database.connect()

    if settings.tracing_enabled:
        setup_tracing(settings)
        instrument_sqlalchemy(database.engine.sync_engine)

    app.state.queue = JobQueue(database, settings, metrics)

    logger.info("Application started")

    yield

    # Shutdown
    app.state.queue = None
    await database.dispose()
    shutdown_tracing()
    logger.info("Application shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. Loaded from the environment if omitted.

    Returns:
        FastAPI: The configured application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Job Queue API",
        description="Job queue with atomic, exactly-once job claiming",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.queue = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(workers_router)
    app.include_router(jobs_router)
    app.include_router(log_messages_router)

    if settings.tracing_enabled:
        instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
