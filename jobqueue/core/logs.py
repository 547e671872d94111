"""
Log append service.

Workers attach progress notes to jobs. Messages are append-only and may
be written whatever state the job is in.
"""

import logging

from jobqueue.constants import EntityKind
from jobqueue.db.connection import Database
from jobqueue.db.models import LogMessage
from jobqueue.db.repository import JobRepository, LogMessageRepository, WorkerRepository
from jobqueue.errors import NotFoundError
from jobqueue.observability.metrics import MetricsCollector, get_metrics

logger = logging.getLogger(__name__)


class LogAppendService:
    """Records worker-authored log messages against jobs."""

    def __init__(self, database: Database, metrics: MetricsCollector | None = None):
        self._database = database
        self._metrics = metrics or get_metrics()

    async def append_log(self, job_id: int, worker_id: int, text: str) -> LogMessage:
        """
        Append a log message to a job.

        Both references are checked before anything is written.

        Args:
            job_id: The job the message belongs to.
            worker_id: The worker writing it.
            text: Message text.

        Returns:
            The new LogMessage with its job and worker loaded.

        Raises:
            NotFoundError: Naming the job or the worker that does not exist.
        """
        message = LogMessage.new(job_id=job_id, worker_id=worker_id, text=text)

        async with self._database.session() as session:
            if await JobRepository(session).get_job(job_id) is None:
                raise NotFoundError(EntityKind.JOB, job_id)
            if await WorkerRepository(session).get_worker(worker_id) is None:
                raise NotFoundError(EntityKind.WORKER, worker_id)

            repo = LogMessageRepository(session)
            message = await repo.insert_log_message(message)
            message = await repo.get_log_message(message.id)

        self._metrics.record_log_message()
        logger.debug(
            "Appended log message",
            extra={"job_id": job_id, "worker_id": worker_id, "log_message_id": message.id}
        )
        return message
