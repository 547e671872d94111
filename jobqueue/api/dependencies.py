"""
FastAPI dependencies.
"""

from typing import Annotated

from fastapi import Depends, Request

from jobqueue.core.queue import JobQueue


def get_queue(request: Request) -> JobQueue:
    """
    FastAPI dependency returning the queue built at startup.

    Raises:
        RuntimeError: If the application lifespan has not run.
    """
    queue = getattr(request.app.state, "queue", None)
    if queue is None:
        raise RuntimeError("Job queue not initialized. Is the lifespan running?")
    return queue


# Type alias for dependency injection
Queue = Annotated[JobQueue, Depends(get_queue)]
