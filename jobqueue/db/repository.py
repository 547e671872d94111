"""
Repositories for database operations.
Implements the data access patterns the queue core is built on:
find, insert and conditional update.
"""

import logging
from typing import Any, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobqueue.constants import JobStatus
from jobqueue.db.models import Job, LogMessage, Worker, utcnow

logger = logging.getLogger(__name__)


class WorkerRepository:
    """Repository for worker records."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def insert_worker(self, worker: Worker) -> Worker:
        """Insert a new worker and assign its identifier."""
        self._session.add(worker)
        await self._session.flush()
        return worker

    async def get_worker(self, worker_id: int, lock: bool = False) -> Worker | None:
        """
        Get a worker by ID.

        Args:
            worker_id: The worker identifier.
            lock: Hold a shared row lock until the transaction ends
                (FOR SHARE where the engine supports row locks).

        Returns:
            The Worker or None if not found.
        """
        stmt = select(Worker).where(Worker.id == worker_id)
        if lock:
            stmt = stmt.with_for_update(read=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()


class JobRepository:
    """
    Repository for job database operations.

    Status and owner columns are only ever written through update_if,
    which applies a change only while the job is still in the expected
    status.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            session: The async database session.
        """
        self._session = session

    async def insert_job(self, job: Job) -> Job:
        """Insert a new job and assign its identifier."""
        self._session.add(job)
        await self._session.flush()
        logger.info(
            "Created new job",
            extra={"job_id": job.id, "priority": job.priority}
        )
        return job

    async def get_job(self, job_id: int, with_relations: bool = False) -> Job | None:
        """
        Get a job by ID.

        Args:
            job_id: The job identifier.
            with_relations: Also load the owner and log messages.

        Returns:
            The Job (freshly read from the database) or None if not found.
        """
        stmt = (
            select(Job)
            .where(Job.id == job_id)
            .execution_options(populate_existing=True)
        )
        if with_relations:
            stmt = stmt.options(
                selectinload(Job.worker),
                selectinload(Job.log_messages),
            )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_jobs(self) -> Sequence[Job]:
        """List every job with its owner and log messages, oldest first."""
        stmt = (
            select(Job)
            .options(
                selectinload(Job.worker),
                selectinload(Job.log_messages),
            )
            .order_by(Job.id.asc())
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def next_waiting_job_id(self) -> int | None:
        """
        Pick the next claim candidate.

        Order: lowest priority value, then oldest, then lowest id. On
        engines with row locks the candidate is locked with
        FOR UPDATE SKIP LOCKED so concurrent claimers pick different rows.
        SQLite ignores the locking clause; update_if still guards the
        transition.

        Returns:
            The candidate job id or None when nothing is waiting.
        """
        stmt = (
            select(Job.id)
            .where(Job.status == JobStatus.WAITING)
            .order_by(
                Job.priority.asc(),
                Job.created_at.asc(),
                Job.id.asc(),
            )
            .limit(1)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_if(
        self,
        job_id: int,
        expected_status: JobStatus,
        **values: Any,
    ) -> bool:
        """
        Conditionally update a job.

        Runs UPDATE ... WHERE id = :job_id AND status = :expected_status.

        Args:
            job_id: The job identifier.
            expected_status: Status the job must still have.
            **values: Column values to write.

        Returns:
            True if exactly one row changed.
        """
        stmt = (
            update(Job)
            .where(
                Job.id == job_id,
                Job.status == expected_status,
            )
            .values(updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def get_queue_depth(self) -> int:
        """Get the number of waiting jobs."""
        stmt = (
            select(func.count())
            .select_from(Job)
            .where(Job.status == JobStatus.WAITING)
        )
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    async def get_job_stats(self) -> dict[str, int]:
        """
        Get job counts by status.

        Returns:
            Dictionary of status -> count, including zero counts.
        """
        stmt = select(Job.status, func.count()).group_by(Job.status)
        result = await self._session.execute(stmt)

        stats = {status.value: 0 for status in JobStatus}
        for status, count in result.all():
            stats[JobStatus(status).value] = count
        return stats


class LogMessageRepository:
    """Repository for append-only log messages."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def insert_log_message(self, message: LogMessage) -> LogMessage:
        """Insert a new log message and assign its identifier."""
        self._session.add(message)
        await self._session.flush()
        return message

    async def get_log_message(self, message_id: int) -> LogMessage | None:
        """Get a log message with its job and worker."""
        stmt = (
            select(LogMessage)
            .where(LogMessage.id == message_id)
            .options(
                selectinload(LogMessage.job),
                selectinload(LogMessage.worker),
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_log_messages(self) -> Sequence[LogMessage]:
        """List every log message with its job and worker, oldest first."""
        stmt = (
            select(LogMessage)
            .options(
                selectinload(LogMessage.job),
                selectinload(LogMessage.worker),
            )
            .order_by(LogMessage.id.asc())
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()
