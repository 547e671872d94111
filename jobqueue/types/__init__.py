"""
Type definitions for the job queue.
Contains API request/response models and worker runtime types.
"""

from jobqueue.types.api import (
    ClaimJobRequest,
    ClaimJobResponse,
    CompleteJobRequest,
    CreateJobRequest,
    CreateLogMessageRequest,
    CreateWorkerRequest,
    ErrorResponse,
    HealthResponse,
    JobResponse,
    JobStatsResponse,
    JobSummary,
    LogMessageResponse,
    LogMessageSummary,
    WorkerResponse,
)
from jobqueue.types.job import JobContext, JobResult

__all__ = [
    # API types
    "CreateWorkerRequest",
    "CreateJobRequest",
    "ClaimJobRequest",
    "CompleteJobRequest",
    "CreateLogMessageRequest",
    "WorkerResponse",
    "JobSummary",
    "JobResponse",
    "ClaimJobResponse",
    "LogMessageSummary",
    "LogMessageResponse",
    "JobStatsResponse",
    "HealthResponse",
    "ErrorResponse",
    # Worker runtime types
    "JobContext",
    "JobResult",
]
