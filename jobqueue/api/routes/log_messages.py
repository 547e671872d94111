"""
Log message routes.
"""

from fastapi import APIRouter, HTTPException, status

from jobqueue.api.dependencies import Queue
from jobqueue.constants import API_V1_PREFIX
from jobqueue.errors import InvalidInputError, NotFoundError
from jobqueue.types.api import CreateLogMessageRequest, ErrorResponse, LogMessageResponse

router = APIRouter(prefix=f"{API_V1_PREFIX}/log-messages", tags=["Log messages"])


@router.post(
    "",
    response_model=LogMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Append a log message",
    description="Attach a progress message from a worker to a job.",
    responses={404: {"model": ErrorResponse}},
)
async def create_log_message(
    request: CreateLogMessageRequest,
    queue: Queue,
) -> LogMessageResponse:
    """
    Append a log message.

    Raises:
        HTTPException: 404 naming the job or worker that does not exist.
    """
    try:
        message = await queue.append_log(
            job_id=request.job_id,
            worker_id=request.worker_id,
            text=request.text,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    return LogMessageResponse.model_validate(message)


@router.get(
    "",
    response_model=list[LogMessageResponse],
    summary="List log messages",
    description="List every log message with its job and worker.",
)
async def list_log_messages(queue: Queue) -> list[LogMessageResponse]:
    messages = await queue.list_logs()
    return [LogMessageResponse.model_validate(message) for message in messages]
