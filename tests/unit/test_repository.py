"""
Unit tests for the repositories.
"""

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jobqueue.constants import JobStatus
from jobqueue.db import Database
from jobqueue.db.models import Job, LogMessage, Worker
from jobqueue.db.repository import JobRepository, LogMessageRepository, WorkerRepository


class TestJobRepository:
    """Tests for JobRepository."""

    @pytest_asyncio.fixture
    async def repo(self, db_session: AsyncSession) -> JobRepository:
        """Create a repository instance."""
        return JobRepository(db_session)

    @pytest_asyncio.fixture
    async def worker(self, db_session: AsyncSession) -> Worker:
        return await WorkerRepository(db_session).insert_worker(Worker.new("w1"))

    @pytest.mark.asyncio
    async def test_insert_job(self, repo: JobRepository):
        job = await repo.insert_job(Job.new("build", in_data="payload", priority=5))

        assert job.id == 1
        assert job.status == JobStatus.WAITING
        assert job.created_at is not None
        assert job.updated_at is not None

    @pytest.mark.asyncio
    async def test_get_job_not_found(self, repo: JobRepository):
        assert await repo.get_job(42) is None

    @pytest.mark.asyncio
    async def test_get_job_with_relations(self, repo: JobRepository):
        job = await repo.insert_job(Job.new("build"))

        loaded = await repo.get_job(job.id, with_relations=True)

        assert loaded.worker is None
        assert loaded.log_messages == []

    @pytest.mark.asyncio
    async def test_next_waiting_job_orders_by_priority(self, repo: JobRepository):
        await repo.insert_job(Job.new("low", priority=10))
        urgent = await repo.insert_job(Job.new("urgent", priority=1))
        await repo.insert_job(Job.new("default"))

        assert await repo.next_waiting_job_id() == urgent.id

    @pytest.mark.asyncio
    async def test_next_waiting_job_ties_broken_by_age(self, repo: JobRepository):
        first = await repo.insert_job(Job.new("a", priority=3))
        await repo.insert_job(Job.new("b", priority=3))

        assert await repo.next_waiting_job_id() == first.id

    @pytest.mark.asyncio
    async def test_next_waiting_job_empty(self, repo: JobRepository):
        assert await repo.next_waiting_job_id() is None

    @pytest.mark.asyncio
    async def test_update_if_matching_status(
        self,
        repo: JobRepository,
        worker: Worker,
    ):
        job = await repo.insert_job(Job.new("build"))

        updated = await repo.update_if(
            job.id,
            JobStatus.WAITING,
            status=JobStatus.RUNNING,
            worker_id=worker.id,
        )

        assert updated is True
        stored = await repo.get_job(job.id)
        assert stored.status == JobStatus.RUNNING
        assert stored.worker_id == worker.id
        assert await repo.next_waiting_job_id() is None

    @pytest.mark.asyncio
    async def test_update_if_stale_status(
        self,
        repo: JobRepository,
        worker: Worker,
    ):
        job = await repo.insert_job(Job.new("build"))
        await repo.update_if(
            job.id,
            JobStatus.WAITING,
            status=JobStatus.RUNNING,
            worker_id=worker.id,
        )

        # A second claimer still expecting "waiting" changes nothing
        updated = await repo.update_if(
            job.id,
            JobStatus.WAITING,
            status=JobStatus.RUNNING,
            worker_id=worker.id,
        )

        assert updated is False

    @pytest.mark.asyncio
    async def test_update_if_unknown_job(self, repo: JobRepository):
        assert await repo.update_if(99, JobStatus.WAITING, status=JobStatus.RUNNING) is False

    @pytest.mark.asyncio
    async def test_owner_must_match_status(self, database: Database):
        async with database.session() as session:
            job = await JobRepository(session).insert_job(Job.new("build"))

        # running without an owner violates the check constraint
        with pytest.raises(IntegrityError):
            async with database.session() as session:
                await JobRepository(session).update_if(
                    job.id,
                    JobStatus.WAITING,
                    status=JobStatus.RUNNING,
                )

    @pytest.mark.asyncio
    async def test_job_stats(self, repo: JobRepository, worker: Worker):
        job = await repo.insert_job(Job.new("a"))
        await repo.insert_job(Job.new("b"))
        await repo.update_if(
            job.id,
            JobStatus.WAITING,
            status=JobStatus.RUNNING,
            worker_id=worker.id,
        )

        stats = await repo.get_job_stats()

        assert stats == {"waiting": 1, "running": 1, "finished": 0}
        assert await repo.get_queue_depth() == 1

    @pytest.mark.asyncio
    async def test_list_jobs_oldest_first(self, repo: JobRepository):
        await repo.insert_job(Job.new("a", priority=50))
        await repo.insert_job(Job.new("b", priority=1))

        jobs = await repo.list_jobs()

        assert [job.name for job in jobs] == ["a", "b"]


class TestLogMessageRepository:
    """Tests for LogMessageRepository."""

    @pytest.mark.asyncio
    async def test_insert_and_load(self, db_session: AsyncSession):
        worker = await WorkerRepository(db_session).insert_worker(Worker.new("w1"))
        job = await JobRepository(db_session).insert_job(Job.new("build"))
        repo = LogMessageRepository(db_session)

        message = await repo.insert_log_message(
            LogMessage.new(job_id=job.id, worker_id=worker.id, text="hello")
        )
        loaded = await repo.get_log_message(message.id)

        assert loaded.text == "hello"
        assert loaded.job.name == "build"
        assert loaded.worker.name == "w1"
        assert [m.id for m in await repo.list_log_messages()] == [message.id]

    @pytest.mark.asyncio
    async def test_foreign_keys_enforced(self, database: Database):
        with pytest.raises(IntegrityError):
            async with database.session() as session:
                await LogMessageRepository(session).insert_log_message(
                    LogMessage.new(job_id=1, worker_id=1, text="orphan")
                )


class TestWorkerRepository:
    """Tests for WorkerRepository."""

    @pytest.mark.asyncio
    async def test_get_worker(self, db_session: AsyncSession):
        repo = WorkerRepository(db_session)
        worker = await repo.insert_worker(Worker.new("w1"))

        assert (await repo.get_worker(worker.id)).name == "w1"
        assert (await repo.get_worker(worker.id, lock=True)).name == "w1"
        assert await repo.get_worker(999) is None

    @pytest.mark.asyncio
    async def test_names_need_not_be_unique(self, db_session: AsyncSession):
        repo = WorkerRepository(db_session)
        first = await repo.insert_worker(Worker.new("same"))
        second = await repo.insert_worker(Worker.new("same"))

        assert first.id != second.id
