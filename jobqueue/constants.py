"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class JobStatus(StrEnum):
    """
    Job lifecycle states.

    State transitions:
    - WAITING -> RUNNING (claimed by a worker)
    - RUNNING -> FINISHED (completed)
    """

    WAITING = "waiting"
    RUNNING = "running"
    FINISHED = "finished"


class EntityKind(StrEnum):
    """Kinds of records referenced in error messages."""

    JOB = "job"
    WORKER = "worker"


# Lower value = claimed first
DEFAULT_PRIORITY = 1000
DEFAULT_CLAIM_MAX_RETRIES = 5

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_QUEUE_DEPTH = "job_queue_depth"
METRIC_WORKERS_REGISTERED = "workers_registered_total"
METRIC_JOBS_CREATED = "jobs_created_total"
METRIC_JOBS_CLAIMED = "jobs_claimed_total"
METRIC_CLAIM_CONFLICTS = "claim_conflicts_total"
METRIC_CLAIM_CONTENTION = "claim_contention_total"
METRIC_CLAIM_LATENCY = "claim_latency_seconds"
METRIC_JOBS_COMPLETED = "jobs_completed_total"
METRIC_LOG_MESSAGES = "log_messages_appended_total"

# Trace span names
SPAN_CLAIM_JOB = "claim_job"
SPAN_COMPLETE_JOB = "complete_job"
SPAN_EXECUTE_JOB = "execute_job"
