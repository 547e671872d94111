"""
Job Queue

A job queue where workers register, claim waiting jobs exactly once,
report progress through append-only log messages and mark jobs finished.
"""

__version__ = "1.0.0"
