"""
Atomic claim engine.

Hands each waiting job to exactly one worker. A claim picks the best
candidate and flips it with a conditional update:

    UPDATE jobs SET status = 'running', worker_id = :worker
    WHERE id = :candidate AND status = 'waiting'

The update changes one row only if no other claimer got there first. When
it changes none, the race was lost and the next candidate is tried, up to
max_retries times.
"""

import logging
import time

from jobqueue.constants import (
    DEFAULT_CLAIM_MAX_RETRIES,
    SPAN_CLAIM_JOB,
    EntityKind,
    JobStatus,
)
from jobqueue.core.lifecycle import required_source
from jobqueue.db.connection import Database
from jobqueue.db.models import Job, Worker
from jobqueue.db.repository import JobRepository, WorkerRepository
from jobqueue.errors import ContentionError, NotFoundError
from jobqueue.observability.metrics import MetricsCollector, get_metrics
from jobqueue.observability.tracing import queue_span, set_queue_attributes

logger = logging.getLogger(__name__)


class ClaimEngine:
    """
    Matches workers to waiting jobs.

    Selection order among waiting jobs: lowest priority value, then oldest
    creation time, then lowest id.
    """

    def __init__(
        self,
        database: Database,
        max_retries: int = DEFAULT_CLAIM_MAX_RETRIES,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize the claim engine.

        Args:
            database: The storage handle.
            max_retries: Conditional updates to try before giving up.
            metrics: Optional metrics collector.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self._database = database
        self._max_retries = max_retries
        self._metrics = metrics or get_metrics()

    async def claim_job(self, worker_id: int) -> Job | None:
        """
        Claim the next waiting job for a worker.

        The worker lookup and the claim run in one transaction: the worker
        row is held with FOR SHARE on Postgres, and SQLite sessions hold
        the write lock from their first query (BEGIN IMMEDIATE).

        Args:
            worker_id: The claiming worker.

        Returns:
            The claimed job, now running and owned by the worker, or None
            when no job is waiting.

        Raises:
            NotFoundError: If the worker does not exist. No job is touched.
            ContentionError: If every attempt lost its race.
        """
        start_time = time.perf_counter()

        with queue_span(SPAN_CLAIM_JOB, worker_id=worker_id) as span:
            async with self._database.session() as session:
                worker = await WorkerRepository(session).get_worker(worker_id, lock=True)
                if worker is None:
                    raise NotFoundError(EntityKind.WORKER, worker_id)

                job = await self._claim_next(JobRepository(session), worker)

            set_queue_attributes(
                span,
                job_id=job.id if job is not None else None,
                outcome="claimed" if job is not None else "empty",
            )

        self._metrics.record_claim(
            claimed=job is not None,
            duration_seconds=time.perf_counter() - start_time,
        )
        return job

    async def _claim_next(self, jobs: JobRepository, worker: Worker) -> Job | None:
        expected = required_source(JobStatus.RUNNING)

        for attempt in range(1, self._max_retries + 1):
            candidate_id = await jobs.next_waiting_job_id()
            if candidate_id is None:
                logger.debug("No waiting jobs", extra={"worker_id": worker.id})
                return None

            claimed = await jobs.update_if(
                candidate_id,
                expected,
                status=JobStatus.RUNNING,
                worker_id=worker.id,
            )
            if claimed:
                logger.info(
                    "Claimed job",
                    extra={
                        "job_id": candidate_id,
                        "worker_id": worker.id,
                        "attempt": attempt,
                    }
                )
                return await jobs.get_job(candidate_id, with_relations=True)

            self._metrics.record_claim_conflict()
            logger.info(
                "Lost claim race, trying next candidate",
                extra={
                    "job_id": candidate_id,
                    "worker_id": worker.id,
                    "attempt": attempt,
                }
            )

        self._metrics.record_claim_contention()
        logger.warning(
            "Claim retries exhausted",
            extra={"worker_id": worker.id, "attempts": self._max_retries}
        )
        raise ContentionError(worker.id, self._max_retries)
