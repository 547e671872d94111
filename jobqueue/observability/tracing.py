"""
OpenTelemetry tracing for the job queue.

Spans cover the steps worth following per job: the claim, the handler run
and the completion. Each span carries the ids it concerns as `jobqueue.*`
attributes, so a trace backend can follow one job across API and worker
processes.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

from jobqueue import __version__
from jobqueue.config import Settings, get_settings
from jobqueue.constants import SPAN_CLAIM_JOB, SPAN_COMPLETE_JOB, SPAN_EXECUTE_JOB

logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "jobqueue"
QUEUE_SPANS = (SPAN_CLAIM_JOB, SPAN_EXECUTE_JOB, SPAN_COMPLETE_JOB)

# Provider installed by setup_tracing, kept for shutdown
_provider: TracerProvider | None = None


def setup_tracing(settings: Settings | None = None) -> None:
    """
    Install a tracer provider exporting to the OTLP collector.

    Safe to call more than once; only the first call installs a provider.

    Args:
        settings: Application settings.
    """
    global _provider

    if _provider is not None:
        return

    settings = settings or get_settings()

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.namespace": ATTRIBUTE_PREFIX,
            "service.version": __version__,
            "jobqueue.spans": list(QUEUE_SPANS),
        }
    )

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=settings.otel_exporter_otlp_endpoint,
                insecure=True,
            )
        )
    )
    trace.set_tracer_provider(provider)
    _provider = provider

    logger.info(
        "Tracing enabled",
        extra={"endpoint": settings.otel_exporter_otlp_endpoint},
    )


def shutdown_tracing() -> None:
    """Flush pending spans and stop the exporter."""
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None


def instrument_fastapi(app: Any) -> None:
    """Trace every request handled by the FastAPI app."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine: Any) -> None:
    """
    Trace every statement run on an engine.

    Args:
        engine: The sync engine behind the AsyncEngine (engine.sync_engine).
    """
    SQLAlchemyInstrumentor().instrument(engine=engine)


def get_tracer() -> Tracer:
    """
    Get the job queue tracer.

    Comes from the globally registered provider, which is a no-op one
    unless setup_tracing ran.
    """
    return trace.get_tracer(ATTRIBUTE_PREFIX, __version__)


def set_queue_attributes(span: Span, **attributes: bool | int | str | None) -> None:
    """Set `jobqueue.<name>` attributes on a span, skipping unset values."""
    for key, value in attributes.items():
        if value is not None:
            span.set_attribute(f"{ATTRIBUTE_PREFIX}.{key}", value)


@contextmanager
def queue_span(name: str, **attributes: bool | int | str | None) -> Iterator[Span]:
    """
    Run a block inside a queue span.

    Exceptions leaving the block are recorded on the span and mark it as
    an error.

    Example:
        with queue_span(SPAN_CLAIM_JOB, worker_id=worker_id) as span:
            ...
            set_queue_attributes(span, job_id=job.id)
    """
    with get_tracer().start_as_current_span(name) as span:
        set_queue_attributes(span, **attributes)
        yield span
