"""
API request and response type definitions.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jobqueue.constants import DEFAULT_PRIORITY, JobStatus


class CreateWorkerRequest(BaseModel):
    """Request body for registering a worker."""

    name: str = Field(..., min_length=1, max_length=255, description="Worker name")


class CreateJobRequest(BaseModel):
    """Request body for creating a new job."""

    name: str = Field(..., min_length=1, max_length=255, description="Job name")
    in_data: str | None = Field(default=None, description="Input payload")
    priority: int | None = Field(
        default=None,
        description=f"Lower runs first. Defaults to {DEFAULT_PRIORITY}",
    )


class ClaimJobRequest(BaseModel):
    """Request body for claiming the next waiting job."""

    worker_id: int = Field(..., description="Claiming worker")


class CompleteJobRequest(BaseModel):
    """Request body for finishing a running job."""

    out_data: str | None = Field(default=None, description="Output payload")


class CreateLogMessageRequest(BaseModel):
    """Request body for appending a log message."""

    job_id: int
    worker_id: int
    text: str


class WorkerResponse(BaseModel):
    """Worker details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class JobSummary(BaseModel):
    """Job fields without nested records."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    priority: int
    status: JobStatus
    in_data: str | None
    out_data: str | None
    worker_id: int | None
    created_at: datetime
    updated_at: datetime


class LogMessageSummary(BaseModel):
    """Log message fields without nested records."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    job_id: int
    worker_id: int
    created_at: datetime
    updated_at: datetime


class JobResponse(JobSummary):
    """Full job details with owner and log messages."""

    worker: WorkerResponse | None
    log_messages: list[LogMessageSummary]


class ClaimJobResponse(BaseModel):
    """Claim result. `job` is null when no job is waiting."""

    job: JobResponse | None


class LogMessageResponse(LogMessageSummary):
    """Full log message details with job and worker."""

    job: JobSummary
    worker: WorkerResponse


class JobStatsResponse(BaseModel):
    """Job counts by status."""

    stats: dict[str, int]
    queue_depth: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
