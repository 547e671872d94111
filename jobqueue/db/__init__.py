"""
Database module.
Contains the database handle, models, and repository implementations.
"""

from jobqueue.db.connection import Database, create_engine
from jobqueue.db.models import Base, Job, LogMessage, Worker
from jobqueue.db.repository import (
    JobRepository,
    LogMessageRepository,
    WorkerRepository,
)

__all__ = [
    "Database",
    "create_engine",
    "Base",
    "Job",
    "LogMessage",
    "Worker",
    "JobRepository",
    "LogMessageRepository",
    "WorkerRepository",
]
