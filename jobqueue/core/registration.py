"""
Creation and registration of jobs and workers.
"""

import logging

from jobqueue.db.connection import Database
from jobqueue.db.models import Job, Worker
from jobqueue.db.repository import JobRepository, WorkerRepository
from jobqueue.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)


class RegistrationService:
    """Admits new workers and jobs into the queue."""

    def __init__(self, database: Database, metrics: MetricsCollector | None = None):
        self._database = database
        self._metrics = metrics or get_metrics()

    async def create_worker(self, name: str) -> Worker:
        """
        Register a worker.

        Raises:
            InvalidInputError: If the name is empty.
        """
        worker = Worker.new(name)

        async with self._database.session() as session:
            worker = await WorkerRepository(session).insert_worker(worker)

        self._metrics.record_worker_registered()
        logger.info(
            "Registered worker",
            extra={"worker_id": worker.id, "worker_name": worker.name}
        )
        return worker

    async def create_job(
        self,
        name: str,
        in_data: str | None = None,
        priority: int | None = None,
    ) -> Job:
        """
        Create a waiting, unowned job.

        Args:
            name: Job name, also used by workers to pick a handler.
            in_data: Optional input payload.
            priority: Lower runs first. Defaults to 1000 when None.

        Returns:
            The new Job with (empty) owner and log messages loaded.

        Raises:
            InvalidInputError: If the name is empty.
        """
        job = Job.new(name, in_data=in_data, priority=priority)

        async with self._database.session() as session:
            repo = JobRepository(session)
            job = await repo.insert_job(job)
            job = await repo.get_job(job.id, with_relations=True)

        self._metrics.record_job_created()
        return job
