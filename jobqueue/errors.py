"""
Errors raised by the job queue core.

Every failure names what went wrong in its attributes so callers never
have to parse messages. "No job available" is not an error: the claim
engine returns None for it.
"""

from jobqueue.constants import EntityKind, JobStatus


class JobQueueError(Exception):
    """Base job queue error."""


class NotFoundError(JobQueueError):
    """Raised when a referenced job or worker does not exist."""

    def __init__(self, entity: EntityKind, identifier: int):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity.value.capitalize()} {identifier} not found")


class InvalidStateError(JobQueueError):
    """Raised when a job is not in the state an operation requires."""

    def __init__(self, job_id: int, status: JobStatus, expected: JobStatus):
        self.job_id = job_id
        self.status = status
        self.expected = expected
        super().__init__(
            f"Job {job_id} is {status.value}, expected {expected.value}"
        )


class ContentionError(JobQueueError):
    """Raised when a claim keeps losing races and gives up; retry later."""

    def __init__(self, worker_id: int, attempts: int):
        self.worker_id = worker_id
        self.attempts = attempts
        super().__init__(
            f"Worker {worker_id} could not claim a job after {attempts} attempts"
        )


class InvalidInputError(JobQueueError, ValueError):
    """Raised when a record would be created with invalid fields."""
