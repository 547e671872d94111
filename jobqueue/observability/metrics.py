"""
Prometheus metrics collection.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from jobqueue.constants import (
    METRIC_CLAIM_CONFLICTS,
    METRIC_CLAIM_CONTENTION,
    METRIC_CLAIM_LATENCY,
    METRIC_JOBS_CLAIMED,
    METRIC_JOBS_COMPLETED,
    METRIC_JOBS_CREATED,
    METRIC_LOG_MESSAGES,
    METRIC_QUEUE_DEPTH,
    METRIC_WORKERS_REGISTERED,
)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


class MetricsCollector:
    """
    Prometheus metrics collector for the job queue.

    Collects metrics for:
    - Queue depth
    - Worker registrations and job creations
    - Claims, lost claim races and contention failures
    - Job completions and appended log messages
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional custom registry. Uses default if not provided.
        """
        self._registry = registry or REGISTRY

        self.queue_depth = Gauge(
            METRIC_QUEUE_DEPTH,
            "Number of waiting jobs",
            registry=self._registry,
        )

        self.workers_registered = Counter(
            METRIC_WORKERS_REGISTERED,
            "Total number of workers registered",
            registry=self._registry,
        )

        self.jobs_created = Counter(
            METRIC_JOBS_CREATED,
            "Total number of jobs created",
            registry=self._registry,
        )

        # Claim attempts by outcome: claimed or empty
        self.jobs_claimed = Counter(
            METRIC_JOBS_CLAIMED,
            "Total number of claim calls by outcome",
            ["outcome"],
            registry=self._registry,
        )

        self.claim_conflicts = Counter(
            METRIC_CLAIM_CONFLICTS,
            "Total number of claim races lost to another worker",
            registry=self._registry,
        )

        self.claim_contention = Counter(
            METRIC_CLAIM_CONTENTION,
            "Total number of claims that exhausted their retries",
            registry=self._registry,
        )

        self.claim_latency = Histogram(
            METRIC_CLAIM_LATENCY,
            "Claim latency in seconds",
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        self.jobs_completed = Counter(
            METRIC_JOBS_COMPLETED,
            "Total number of jobs finished",
            registry=self._registry,
        )

        self.log_messages = Counter(
            METRIC_LOG_MESSAGES,
            "Total number of log messages appended",
            registry=self._registry,
        )

    def record_worker_registered(self) -> None:
        """Record a worker registration."""
        self.workers_registered.inc()

    def record_job_created(self) -> None:
        """Record a job creation."""
        self.jobs_created.inc()

    def record_claim(self, claimed: bool, duration_seconds: float) -> None:
        """Record a finished claim call."""
        self.jobs_claimed.labels(outcome="claimed" if claimed else "empty").inc()
        self.claim_latency.observe(duration_seconds)

    def record_claim_conflict(self) -> None:
        """Record a claim race lost to a concurrent worker."""
        self.claim_conflicts.inc()

    def record_claim_contention(self) -> None:
        """Record a claim that gave up after its retries."""
        self.claim_contention.inc()

    def record_job_completed(self) -> None:
        """Record a job completion."""
        self.jobs_completed.inc()

    def record_log_message(self) -> None:
        """Record an appended log message."""
        self.log_messages.inc()

    def update_queue_depth(self, depth: int) -> None:
        """Update the number of waiting jobs."""
        self.queue_depth.set(depth)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


def setup_metrics() -> MetricsCollector:
    """
    Set up and return the metrics collector.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the metrics collector instance, creating it on first use.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
