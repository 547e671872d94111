"""
Unit tests for the job lifecycle and the completion point.
"""

import pytest

from jobqueue.constants import EntityKind, JobStatus
from jobqueue.core.lifecycle import (
    TRANSITIONS,
    can_transition,
    ensure_transition,
    required_source,
)
from jobqueue.core.queue import JobQueue
from jobqueue.errors import InvalidStateError, NotFoundError


class TestTransitions:
    """Tests for the transition table."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.WAITING, JobStatus.RUNNING),
            (JobStatus.RUNNING, JobStatus.FINISHED),
        ],
    )
    def test_allowed_transitions(self, current: JobStatus, target: JobStatus):
        assert can_transition(current, target) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.WAITING, JobStatus.FINISHED),
            (JobStatus.WAITING, JobStatus.WAITING),
            (JobStatus.RUNNING, JobStatus.WAITING),
            (JobStatus.RUNNING, JobStatus.RUNNING),
            (JobStatus.FINISHED, JobStatus.WAITING),
            (JobStatus.FINISHED, JobStatus.RUNNING),
            (JobStatus.FINISHED, JobStatus.FINISHED),
        ],
    )
    def test_rejected_transitions(self, current: JobStatus, target: JobStatus):
        assert can_transition(current, target) is False

    def test_finished_is_terminal(self):
        assert JobStatus.FINISHED not in TRANSITIONS

    def test_required_source(self):
        assert required_source(JobStatus.RUNNING) == JobStatus.WAITING
        assert required_source(JobStatus.FINISHED) == JobStatus.RUNNING

    def test_required_source_unreachable_target(self):
        with pytest.raises(ValueError):
            required_source(JobStatus.WAITING)

    def test_ensure_transition_reports_state(self):
        with pytest.raises(InvalidStateError) as exc_info:
            ensure_transition(7, JobStatus.WAITING, JobStatus.FINISHED)

        assert exc_info.value.job_id == 7
        assert exc_info.value.status == JobStatus.WAITING
        assert exc_info.value.expected == JobStatus.RUNNING
        assert str(exc_info.value) == "Job 7 is waiting, expected running"


class TestCompleteJob:
    """Tests for finishing jobs."""

    @pytest.mark.asyncio
    async def test_complete_running_job(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build", in_data="src")
        await queue.claim_job(worker.id)

        finished = await queue.complete_job(job.id, out_data="artifact")

        assert finished.status == JobStatus.FINISHED
        assert finished.out_data == "artifact"
        assert finished.worker_id == worker.id
        assert finished.worker.name == "w1"
        assert finished.in_data == "src"

    @pytest.mark.asyncio
    async def test_complete_without_output(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")
        await queue.claim_job(worker.id)

        finished = await queue.complete_job(job.id)

        assert finished.status == JobStatus.FINISHED
        assert finished.out_data is None

    @pytest.mark.asyncio
    async def test_complete_waiting_job_rejected(self, queue: JobQueue):
        job = await queue.create_job("build")

        with pytest.raises(InvalidStateError) as exc_info:
            await queue.complete_job(job.id, out_data="x")

        assert exc_info.value.status == JobStatus.WAITING

        stored = await queue.get_job(job.id)
        assert stored.status == JobStatus.WAITING
        assert stored.out_data is None
        assert stored.worker_id is None

    @pytest.mark.asyncio
    async def test_complete_finished_job_rejected(self, queue: JobQueue):
        worker = await queue.create_worker("w1")
        job = await queue.create_job("build")
        await queue.claim_job(worker.id)
        await queue.complete_job(job.id, out_data="first")

        with pytest.raises(InvalidStateError) as exc_info:
            await queue.complete_job(job.id, out_data="second")

        assert exc_info.value.status == JobStatus.FINISHED

        stored = await queue.get_job(job.id)
        assert stored.out_data == "first"

    @pytest.mark.asyncio
    async def test_complete_unknown_job(self, queue: JobQueue):
        with pytest.raises(NotFoundError) as exc_info:
            await queue.complete_job(999)

        assert exc_info.value.entity == EntityKind.JOB
        assert exc_info.value.identifier == 999
