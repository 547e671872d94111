"""
Unit tests for model constructors and errors.
"""

import pytest

from jobqueue.constants import DEFAULT_PRIORITY, EntityKind, JobStatus
from jobqueue.db.models import Job, LogMessage, Worker
from jobqueue.errors import InvalidInputError, JobQueueError, NotFoundError


class TestJobModel:
    """Tests for Job.new."""

    def test_defaults(self):
        job = Job.new("build")

        assert job.name == "build"
        assert job.priority == DEFAULT_PRIORITY
        assert job.status == JobStatus.WAITING
        assert job.worker_id is None
        assert job.in_data is None

    def test_explicit_priority_zero_is_kept(self):
        job = Job.new("urgent", priority=0)

        assert job.priority == 0

    def test_negative_priority_allowed(self):
        job = Job.new("urgent", priority=-5)

        assert job.priority == -5

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name: str):
        with pytest.raises(InvalidInputError):
            Job.new(name)


class TestWorkerModel:
    """Tests for Worker.new."""

    def test_new(self):
        worker = Worker.new("w1")
        assert worker.name == "w1"

    def test_empty_name_rejected(self):
        with pytest.raises(InvalidInputError):
            Worker.new("")


class TestLogMessageModel:
    """Tests for LogMessage.new."""

    def test_new(self):
        message = LogMessage.new(job_id=1, worker_id=2, text="hello")

        assert message.job_id == 1
        assert message.worker_id == 2
        assert message.text == "hello"

    def test_empty_text_allowed(self):
        message = LogMessage.new(job_id=1, worker_id=2, text="")
        assert message.text == ""

    def test_missing_text_rejected(self):
        with pytest.raises(InvalidInputError):
            LogMessage.new(job_id=1, worker_id=2, text=None)


class TestErrors:
    """Tests for error messages and hierarchy."""

    def test_not_found_message(self):
        assert str(NotFoundError(EntityKind.JOB, 5)) == "Job 5 not found"
        assert str(NotFoundError(EntityKind.WORKER, 5)) == "Worker 5 not found"

    def test_invalid_input_is_value_error(self):
        error = InvalidInputError("bad")

        assert isinstance(error, JobQueueError)
        assert isinstance(error, ValueError)
