"""
Job management routes.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from jobqueue.api.dependencies import Queue
from jobqueue.constants import API_V1_PREFIX
from jobqueue.db.models import Job
from jobqueue.errors import ContentionError, InvalidInputError, InvalidStateError, NotFoundError
from jobqueue.types.api import (
    ClaimJobRequest,
    ClaimJobResponse,
    CompleteJobRequest,
    CreateJobRequest,
    ErrorResponse,
    JobResponse,
    JobStatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_V1_PREFIX}/jobs", tags=["Jobs"])

# Seconds a client should wait before retrying a contended claim
CLAIM_RETRY_AFTER_SECONDS = 1


def _job_to_response(job: Job) -> JobResponse:
    """Convert a Job model (with owner and logs loaded) to a JobResponse."""
    return JobResponse.model_validate(job)


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job",
    description="Add a waiting job to the queue.",
)
async def create_job(request: CreateJobRequest, queue: Queue) -> JobResponse:
    """
    Create a new job.

    Args:
        request: Job creation request.
        queue: The job queue.

    Returns:
        JobResponse for the waiting job.
    """
    try:
        job = await queue.create_job(
            name=request.name,
            in_data=request.in_data,
            priority=request.priority,
        )
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return _job_to_response(job)


@router.get(
    "",
    response_model=list[JobResponse],
    summary="List jobs",
    description="List every job with its owner and log messages.",
)
async def list_jobs(queue: Queue) -> list[JobResponse]:
    jobs = await queue.list_jobs()
    return [_job_to_response(job) for job in jobs]


@router.post(
    "/claim",
    response_model=ClaimJobResponse,
    summary="Claim the next job",
    description=(
        "Atomically assign the next waiting job to a worker. "
        "Returns {\"job\": null} when no job is waiting."
    ),
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def claim_job(request: ClaimJobRequest, queue: Queue) -> ClaimJobResponse:
    """
    Claim the next waiting job.

    Args:
        request: Claim request naming the worker.
        queue: The job queue.

    Returns:
        ClaimJobResponse with the claimed job or null.

    Raises:
        HTTPException: 404 if the worker does not exist, 503 if the claim
            lost too many races (retry later).
    """
    try:
        job = await queue.claim_job(request.worker_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ContentionError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
            headers={"Retry-After": str(CLAIM_RETRY_AFTER_SECONDS)},
        )

    return ClaimJobResponse(job=_job_to_response(job) if job is not None else None)


@router.get(
    "/stats/summary",
    response_model=JobStatsResponse,
    summary="Get job statistics",
    description="Get job counts by status and the number of waiting jobs.",
)
async def get_job_stats(queue: Queue) -> JobStatsResponse:
    stats, queue_depth = await queue.get_job_stats()
    return JobStatsResponse(stats=stats, queue_depth=queue_depth)


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get job details",
    description="Get a job with its owner and log messages.",
    responses={404: {"model": ErrorResponse}},
)
async def get_job(job_id: int, queue: Queue) -> JobResponse:
    try:
        job = await queue.get_job(job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return _job_to_response(job)


@router.post(
    "/{job_id}/complete",
    response_model=JobResponse,
    summary="Finish a job",
    description="Mark a running job as finished and record its output.",
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def complete_job(
    job_id: int,
    queue: Queue,
    request: CompleteJobRequest | None = None,
) -> JobResponse:
    """
    Finish a running job.

    Args:
        job_id: The job identifier.
        queue: The job queue.
        request: Optional body carrying the output payload.

    Returns:
        JobResponse for the finished job.

    Raises:
        HTTPException: 404 if the job does not exist, 409 if it is not
            running.
    """
    out_data = request.out_data if request is not None else None

    try:
        job = await queue.complete_job(job_id, out_data=out_data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return _job_to_response(job)
