"""
Worker module.
Contains the worker runtime and the job handler registry.
"""

from jobqueue.worker.main import WorkerRunner, run

__all__ = ["WorkerRunner", "run"]
