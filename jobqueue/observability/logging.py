"""
Structured logging for the job queue.

Modules log through logging.getLogger(__name__) with ids passed in
`extra=`. One structlog formatter on the root handler renders every
record as JSON or console output. Records lead with the event and the
queue ids (worker, job, log message), taken from `extra=` or from the ids
bound with job_log_context().
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from opentelemetry import trace

from jobqueue.config import Settings, get_settings

# Rendered right after the event, in this order
QUEUE_ID_KEYS = ("worker_id", "job_id", "log_message_id")

# Third-party loggers held at WARNING
_QUIET_LOGGERS = ("uvicorn.access", "aiosqlite", "httpx")


def add_trace_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Add the active trace and span ids, if any."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = trace.format_trace_id(span_context.trace_id)
        event_dict["span_id"] = trace.format_span_id(span_context.span_id)
    return event_dict


def order_queue_ids(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Move queue ids next to the event and drop the unset ones.

    A worker that has not registered yet binds worker_id=None; such keys
    are left out rather than rendered as null.
    """
    ids = {}
    for key in QUEUE_ID_KEYS:
        value = event_dict.pop(key, None)
        if value is not None:
            ids[key] = value
    return {"event": event_dict.pop("event", None), **ids, **event_dict}


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """
    Build the formatter for stdlib log records.

    Args:
        log_format: "json" for one JSON object per line, anything else for
            human-readable console output.
    """
    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.ExtraAdder(),
            order_queue_ids,
            add_trace_context,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(settings: Settings | None = None) -> None:
    """
    Route all logging through the job queue formatter on stdout.

    At DEBUG the SQL emitted by SQLAlchemy is logged too.
    """
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(settings.log_format))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if log_level <= logging.DEBUG else logging.WARNING
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def job_log_context(job_id: int, worker_id: int) -> Iterator[None]:
    """
    Attach a job and its worker to every record logged inside the block.

    Ids bound by an enclosing block are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(job_id=job_id, worker_id=worker_id):
        yield
