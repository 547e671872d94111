"""
Job lifecycle state machine.

waiting -> running -> finished. No state is skipped and no transition
goes backwards. The claim engine owns waiting -> running; the completion
point below owns running -> finished.
"""

import logging

from jobqueue.constants import SPAN_COMPLETE_JOB, EntityKind, JobStatus
from jobqueue.db.connection import Database
from jobqueue.db.models import Job
from jobqueue.db.repository import JobRepository
from jobqueue.errors import InvalidStateError, NotFoundError
from jobqueue.observability.metrics import MetricsCollector, get_metrics
from jobqueue.observability.tracing import queue_span

logger = logging.getLogger(__name__)

# status -> the only status it may move to
TRANSITIONS: dict[JobStatus, JobStatus] = {
    JobStatus.WAITING: JobStatus.RUNNING,
    JobStatus.RUNNING: JobStatus.FINISHED,
}


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    """Check whether a job in `current` may move to `target`."""
    return TRANSITIONS.get(current) == target


def required_source(target: JobStatus) -> JobStatus:
    """
    Get the status a job must have to move into `target`.

    Raises:
        ValueError: If no transition leads into `target`.
    """
    for source, destination in TRANSITIONS.items():
        if destination == target:
            return source
    raise ValueError(f"No transition leads to {target.value}")


def ensure_transition(job_id: int, current: JobStatus, target: JobStatus) -> None:
    """
    Raise InvalidStateError unless `current` may move to `target`.
    """
    if not can_transition(current, target):
        raise InvalidStateError(job_id, current, required_source(target))


class CompletionService:
    """Moves running jobs to finished."""

    def __init__(self, database: Database, metrics: MetricsCollector | None = None):
        self._database = database
        self._metrics = metrics or get_metrics()

    async def complete_job(self, job_id: int, out_data: str | None = None) -> Job:
        """
        Mark a running job as finished and record its output.

        Args:
            job_id: The job identifier.
            out_data: Optional output payload.

        Returns:
            The finished Job with its owner and log messages.

        Raises:
            NotFoundError: If the job does not exist.
            InvalidStateError: If the job is not running, including when a
                concurrent caller finished it first.
        """
        with queue_span(SPAN_COMPLETE_JOB, job_id=job_id):
            async with self._database.session() as session:
                repo = JobRepository(session)

                job = await repo.get_job(job_id)
                if job is None:
                    raise NotFoundError(EntityKind.JOB, job_id)

                ensure_transition(job_id, job.status, JobStatus.FINISHED)

                finished = await repo.update_if(
                    job_id,
                    job.status,
                    status=JobStatus.FINISHED,
                    out_data=out_data,
                )
                if not finished:
                    raise InvalidStateError(
                        job_id, JobStatus.FINISHED, JobStatus.RUNNING
                    )

                job = await repo.get_job(job_id, with_relations=True)

        self._metrics.record_job_completed()
        logger.info(
            "Job finished",
            extra={"job_id": job_id, "worker_id": job.worker_id}
        )
        return job
