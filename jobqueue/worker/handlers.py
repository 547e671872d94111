"""
Job handlers registry and implementations.

A worker picks the handler registered under the claimed job's name.
Handlers report progress through context.log() and return a JobResult
whose output becomes the job's out_data.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from jobqueue.types.job import JobContext, JobResult

logger = logging.getLogger(__name__)

# Type alias for job handler functions
JobHandler = Callable[[JobContext], Awaitable[JobResult]]

# Handler registry
_handlers: dict[str, JobHandler] = {}


def register_handler(job_name: str) -> Callable[[JobHandler], JobHandler]:
    """
    Decorator to register a job handler.

    Args:
        job_name: The job name this handler processes.

    Returns:
        Decorator function.

    Example:
        @register_handler("resize_image")
        async def handle_resize(context: JobContext) -> JobResult:
            ...
    """
    def decorator(handler: JobHandler) -> JobHandler:
        _handlers[job_name] = handler
        logger.debug("Registered handler", extra={"job_name": job_name})
        return handler
    return decorator


def get_handler(job_name: str) -> JobHandler | None:
    """
    Get the handler for a job name.

    Args:
        job_name: The job name.

    Returns:
        The handler function or None if not found.
    """
    return _handlers.get(job_name)


def list_handlers() -> list[str]:
    """List all registered job names."""
    return list(_handlers.keys())


# ============================================================================
# Built-in job handlers
# ============================================================================


@register_handler("echo")
async def handle_echo(context: JobContext) -> JobResult:
    """
    Echo handler for testing.

    Returns the input payload as output.
    """
    return JobResult(success=True, output=context.in_data)


@register_handler("uppercase")
async def handle_uppercase(context: JobContext) -> JobResult:
    """Upper-case the input payload."""
    if not context.has_input:
        return JobResult(success=False, error="Missing input data")

    return JobResult(success=True, output=context.in_data.upper())


@register_handler("sleep")
async def handle_sleep(context: JobContext) -> JobResult:
    """
    Sleep handler for testing delays.

    in_data holds the number of seconds to sleep. Progress is logged once
    per second.
    """
    try:
        duration = float(context.in_data or 1)
    except ValueError:
        return JobResult(
            success=False,
            error=f"Invalid sleep duration: {context.in_data!r}",
        )

    elapsed = 0.0
    while elapsed < duration:
        step = min(1.0, duration - elapsed)
        await asyncio.sleep(step)
        elapsed += step
        await context.log(f"slept {elapsed:g}/{duration:g}s")

    return JobResult(success=True, output=f"{duration:g}")


@register_handler("failing_job")
async def handle_failing_job(context: JobContext) -> JobResult:
    """
    Handler that always fails - for testing failure reporting.
    """
    return JobResult(
        success=False,
        error=f"Intentional failure for job {context.job_id}",
    )


async def execute_job(context: JobContext) -> JobResult:
    """
    Execute a job using the handler registered for its name.

    Args:
        context: The job context.

    Returns:
        JobResult from the handler, or a failed result when no handler
        exists or the handler raised.
    """
    handler = get_handler(context.name)

    if handler is None:
        logger.error(
            "No handler for job",
            extra={"job_id": context.job_id, "job_name": context.name}
        )
        return JobResult(
            success=False,
            error=f"No handler registered for job name: {context.name}",
        )

    start_time = time.perf_counter()
    try:
        result = await handler(context)
    except Exception as e:
        logger.exception(
            "Handler raised exception",
            extra={"job_id": context.job_id, "error": str(e)}
        )
        result = JobResult(
            success=False,
            error=f"Handler exception: {str(e)}",
        )

    result.duration_ms = (time.perf_counter() - start_time) * 1000
    return result
