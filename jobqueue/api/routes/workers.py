"""
Worker registration routes.
"""

from fastapi import APIRouter, HTTPException, status

from jobqueue.api.dependencies import Queue
from jobqueue.constants import API_V1_PREFIX
from jobqueue.errors import InvalidInputError, NotFoundError
from jobqueue.types.api import CreateWorkerRequest, ErrorResponse, WorkerResponse

router = APIRouter(prefix=f"{API_V1_PREFIX}/workers", tags=["Workers"])


@router.post(
    "",
    response_model=WorkerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a worker",
    description="Register a worker that can claim jobs.",
)
async def create_worker(request: CreateWorkerRequest, queue: Queue) -> WorkerResponse:
    try:
        worker = await queue.create_worker(request.name)
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return WorkerResponse.model_validate(worker)


@router.get(
    "/{worker_id}",
    response_model=WorkerResponse,
    summary="Get worker details",
    responses={404: {"model": ErrorResponse}},
)
async def get_worker(worker_id: int, queue: Queue) -> WorkerResponse:
    try:
        worker = await queue.get_worker(worker_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return WorkerResponse.model_validate(worker)
