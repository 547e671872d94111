"""
Worker process for executing jobs.

The worker registers itself, claims waiting jobs one at a time, runs the
handler registered for each job's name, reports progress through log
messages and finally marks the job finished.
"""

import asyncio
import logging
import os
import signal
import socket
from functools import partial

from jobqueue.config import Settings, get_settings
from jobqueue.constants import SPAN_EXECUTE_JOB
from jobqueue.core.queue import JobQueue
from jobqueue.db import Database
from jobqueue.db.models import Job
from jobqueue.errors import ContentionError
from jobqueue.observability.logging import job_log_context, setup_logging
from jobqueue.observability.metrics import setup_metrics
from jobqueue.observability.tracing import (
    queue_span,
    set_queue_attributes,
    setup_tracing,
    shutdown_tracing,
)
from jobqueue.types.job import JobContext
from jobqueue.worker.handlers import execute_job

logger = logging.getLogger(__name__)


class WorkerRunner:
    """
    Job worker that polls for and executes jobs.

    Features:
    - Registers itself once and reuses its worker id
    - Claims through the atomic claim engine
    - Progress reported as log messages on the job
    - Graceful shutdown on SIGTERM/SIGINT
    """

    def __init__(
        self,
        queue: JobQueue,
        name: str | None = None,
        poll_interval: float | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize the worker.

        Args:
            queue: The job queue to work against.
            name: Worker name. Defaults to hostname + PID.
            poll_interval: Seconds between polls when the queue is empty.
            settings: Application settings.
        """
        settings = settings or get_settings()

        self.name = name or settings.worker_name or f"{socket.gethostname()}-{os.getpid()}"
        self.poll_interval = (
            poll_interval
            if poll_interval is not None
            else settings.worker_poll_interval_seconds
        )
        self.worker_id: int | None = None

        self._queue = queue
        self._running = False

    async def register(self) -> int:
        """Register this worker if it has not been registered yet."""
        if self.worker_id is None:
            worker = await self._queue.create_worker(self.name)
            self.worker_id = worker.id
        return self.worker_id

    async def start(self) -> None:
        """Start the worker loop. A stop() during registration still applies."""
        self._running = True

        worker_id = await self.register()
        logger.info(
            "Worker starting",
            extra={"worker_id": worker_id, "worker_name": self.name}
        )

        while self._running:
            try:
                processed = await self.run_once()

                if not processed:
                    await asyncio.sleep(self.poll_interval)

            except ContentionError as e:
                logger.warning(
                    "Claim contention, backing off",
                    extra={"worker_id": worker_id, "attempts": e.attempts}
                )
                await asyncio.sleep(self.poll_interval)

            except Exception as e:
                logger.exception(
                    f"Error in worker loop: {e}",
                    extra={"worker_id": worker_id}
                )
                await asyncio.sleep(self.poll_interval)

        logger.info("Worker stopped", extra={"worker_id": worker_id})

    def stop(self) -> None:
        """Stop the worker after the current job."""
        logger.info("Worker stopping", extra={"worker_id": self.worker_id})
        self._running = False

    async def run_once(self) -> Job | None:
        """
        Claim and execute at most one job.

        Returns:
            The finished job, or None if nothing was waiting.
        """
        worker_id = await self.register()

        job = await self._queue.claim_job(worker_id)
        if job is None:
            return None

        return await self._execute_job(job, worker_id)

    async def _execute_job(self, job: Job, worker_id: int) -> Job:
        """
        Execute a claimed job and mark it finished.

        A failed handler is reported in the job's log and the job is
        finished without output.
        """
        with job_log_context(job_id=job.id, worker_id=worker_id):
            context = JobContext(
                job_id=job.id,
                worker_id=worker_id,
                name=job.name,
                priority=job.priority,
                in_data=job.in_data,
                log_writer=partial(self._queue.append_log, job.id, worker_id),
            )

            await context.log(f"Started by worker {self.name}")

            with queue_span(
                SPAN_EXECUTE_JOB,
                job_id=job.id,
                worker_id=worker_id,
                job_name=job.name,
            ) as span:
                result = await execute_job(context)
                set_queue_attributes(span, succeeded=result.success)

            if result.success:
                await context.log(f"Succeeded in {result.duration_ms:.0f}ms")
                logger.info(
                    "Job succeeded",
                    extra={"duration_ms": result.duration_ms}
                )
            else:
                await context.log(f"Failed: {result.error}")
                logger.warning("Job failed", extra={"error": result.error})

            return await self._queue.complete_job(
                job.id,
                out_data=result.output if result.success else None,
            )


async def run_async(settings: Settings | None = None) -> None:
    """Run the worker asynchronously."""
    settings = settings or get_settings()

    setup_logging(settings)
    setup_metrics()
    if settings.tracing_enabled:
        setup_tracing(settings)

    database = Database(settings)
    await database.connect()

    runner = WorkerRunner(JobQueue(database, settings), settings=settings)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, runner.stop)

    try:
        await runner.start()
    finally:
        await database.dispose()
        shutdown_tracing()


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
