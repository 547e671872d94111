"""
Job-related type definitions for the worker runtime.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


class JobResult(BaseModel):
    """
    Result of job execution.
    Returned by job handlers after processing.
    """

    success: bool
    output: str | None = None
    error: str | None = None
    duration_ms: float | None = None


# Appends a log message to the running job
LogWriter = Callable[[str], Awaitable[Any]]


@dataclass
class JobContext:
    """
    Context passed to job handlers during execution.
    Contains job metadata and a way to report progress.
    """

    job_id: int
    worker_id: int
    name: str
    priority: int
    in_data: str | None
    log_writer: LogWriter = field(repr=False)

    async def log(self, text: str) -> None:
        """Append a progress message to this job."""
        await self.log_writer(text)

    @property
    def has_input(self) -> bool:
        """Check if the job was created with an input payload."""
        return self.in_data is not None
