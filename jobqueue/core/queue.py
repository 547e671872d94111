"""
Job queue facade.

Bundles the core services behind one object built from an explicit
Database handle, and serves the read paths.
"""

from typing import Sequence

from jobqueue.config import Settings, get_settings
from jobqueue.constants import EntityKind
from jobqueue.core.claim import ClaimEngine
from jobqueue.core.lifecycle import CompletionService
from jobqueue.core.logs import LogAppendService
from jobqueue.core.registration import RegistrationService
from jobqueue.db.connection import Database
from jobqueue.db.models import Job, LogMessage, Worker
from jobqueue.db.repository import JobRepository, LogMessageRepository, WorkerRepository
from jobqueue.errors import NotFoundError
from jobqueue.observability.metrics import MetricsCollector, get_metrics


class JobQueue:
    """
    Every queue operation over one storage handle.

    Writes:
    - create_worker / create_job (registration)
    - claim_job (claim engine)
    - complete_job (lifecycle completion point)
    - append_log (log append service)

    Reads take no locks and may trail concurrent claims slightly.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ):
        settings = settings or get_settings()
        self._database = database
        self._metrics = metrics or get_metrics()

        self.registration = RegistrationService(database, self._metrics)
        self.claims = ClaimEngine(
            database,
            max_retries=settings.claim_max_retries,
            metrics=self._metrics,
        )
        self.completion = CompletionService(database, self._metrics)
        self.logs = LogAppendService(database, self._metrics)

    @property
    def database(self) -> Database:
        return self._database

    async def create_worker(self, name: str) -> Worker:
        return await self.registration.create_worker(name)

    async def create_job(
        self,
        name: str,
        in_data: str | None = None,
        priority: int | None = None,
    ) -> Job:
        return await self.registration.create_job(name, in_data=in_data, priority=priority)

    async def claim_job(self, worker_id: int) -> Job | None:
        return await self.claims.claim_job(worker_id)

    async def complete_job(self, job_id: int, out_data: str | None = None) -> Job:
        return await self.completion.complete_job(job_id, out_data=out_data)

    async def append_log(self, job_id: int, worker_id: int, text: str) -> LogMessage:
        return await self.logs.append_log(job_id, worker_id, text)

    async def get_worker(self, worker_id: int) -> Worker:
        """
        Get a worker by ID.

        Raises:
            NotFoundError: If the worker does not exist.
        """
        async with self._database.session() as session:
            worker = await WorkerRepository(session).get_worker(worker_id)
        if worker is None:
            raise NotFoundError(EntityKind.WORKER, worker_id)
        return worker

    async def get_job(self, job_id: int) -> Job:
        """
        Get a job with its owner and log messages.

        Raises:
            NotFoundError: If the job does not exist.
        """
        async with self._database.session() as session:
            job = await JobRepository(session).get_job(job_id, with_relations=True)
        if job is None:
            raise NotFoundError(EntityKind.JOB, job_id)
        return job

    async def list_jobs(self) -> Sequence[Job]:
        """List all jobs with their owners and log messages."""
        async with self._database.session() as session:
            return await JobRepository(session).list_jobs()

    async def list_logs(self) -> Sequence[LogMessage]:
        """List all log messages with their jobs and workers."""
        async with self._database.session() as session:
            return await LogMessageRepository(session).list_log_messages()

    async def get_job_stats(self) -> tuple[dict[str, int], int]:
        """
        Get job counts by status and the current queue depth.

        Also refreshes the queue depth gauge.
        """
        async with self._database.session() as session:
            repo = JobRepository(session)
            stats = await repo.get_job_stats()
            queue_depth = await repo.get_queue_depth()

        self._metrics.update_queue_depth(queue_depth)
        return stats, queue_depth
