"""
Queue core.
Contains the claim engine, lifecycle state machine, log append and
registration services, and the JobQueue facade bundling them.
"""

from jobqueue.core.claim import ClaimEngine
from jobqueue.core.lifecycle import (
    TRANSITIONS,
    CompletionService,
    can_transition,
    ensure_transition,
    required_source,
)
from jobqueue.core.logs import LogAppendService
from jobqueue.core.queue import JobQueue
from jobqueue.core.registration import RegistrationService

__all__ = [
    "ClaimEngine",
    "CompletionService",
    "JobQueue",
    "LogAppendService",
    "RegistrationService",
    "TRANSITIONS",
    "can_transition",
    "ensure_transition",
    "required_source",
]
