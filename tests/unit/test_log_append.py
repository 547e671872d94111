"""
Unit tests for appending log messages.
"""

import pytest

from jobqueue.constants import EntityKind, JobStatus
from jobqueue.core.queue import JobQueue
from jobqueue.errors import NotFoundError


class TestLogAppend:
    """Tests for LogAppendService."""

    @pytest.mark.asyncio
    async def test_append_to_running_job(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")
        await queue.claim_job(worker.id)

        message = await queue.append_log(job.id, worker.id, "step 1 done")

        assert message.id == 1
        assert message.text == "step 1 done"
        assert message.job.id == job.id
        assert message.job.status == JobStatus.RUNNING
        assert message.worker.name == "w1"

    @pytest.mark.asyncio
    async def test_append_in_any_state(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")

        await queue.append_log(job.id, worker.id, "while waiting")
        await queue.claim_job(worker.id)
        await queue.complete_job(job.id)
        await queue.append_log(job.id, worker.id, "after finishing")

        stored = await queue.get_job(job.id)
        assert [m.text for m in stored.log_messages] == [
            "while waiting",
            "after finishing",
        ]

    @pytest.mark.asyncio
    async def test_any_worker_may_log(self, queue: JobQueue):
        owner = await queue.create_worker("owner")
        other = await queue.create_worker("other")
        job = await queue.create_job("build")
        await queue.claim_job(owner.id)

        message = await queue.append_log(job.id, other.id, "observer note")

        assert message.worker_id == other.id

    @pytest.mark.asyncio
    async def test_empty_text_allowed(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")

        message = await queue.append_log(job.id, worker.id, "")

        assert message.text == ""

    @pytest.mark.asyncio
    async def test_unknown_job(self, queue: JobQueue):
        worker = await queue.create_worker("w1")

        with pytest.raises(NotFoundError) as exc_info:
            await queue.append_log(999, worker.id, "lost")

        assert exc_info.value.entity == EntityKind.JOB
        assert await queue.list_logs() == []

    @pytest.mark.asyncio
    async def test_unknown_worker(self, queue: JobQueue):
        job = await queue.create_job("build")

        with pytest.raises(NotFoundError) as exc_info:
            await queue.append_log(job.id, 999, "lost")

        assert exc_info.value.entity == EntityKind.WORKER
        assert await queue.list_logs() == []

    @pytest.mark.asyncio
    async def test_messages_are_listed_in_order(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")

        for i in range(3):
            await queue.append_log(job.id, worker.id, f"line {i}")

        messages = await queue.list_logs()

        assert [m.text for m in messages] == ["line 0", "line 1", "line 2"]
        assert all(m.job.id == job.id for m in messages)
