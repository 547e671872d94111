"""
SQLAlchemy database models.
Defines the workers, jobs and log_messages tables.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from jobqueue.constants import DEFAULT_PRIORITY, JobStatus
from jobqueue.errors import InvalidInputError


def utcnow() -> datetime:
    """Current UTC time, used for all record timestamps."""
    return datetime.now(UTC)


def _require_name(kind: str, name: str) -> str:
    if not name or not name.strip():
        raise InvalidInputError(f"{kind} name must not be empty")
    return name


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """Creation and last-update timestamps shared by every table."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class Worker(TimestampMixin, Base):
    """
    A registered worker.

    Workers are never mutated or deleted once created. Names need not be
    unique.
    """

    __tablename__ = "workers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    jobs: Mapped[list["Job"]] = relationship(
        back_populates="worker",
        lazy="raise",
        order_by="Job.id",
    )
    log_messages: Mapped[list["LogMessage"]] = relationship(
        back_populates="worker",
        lazy="raise",
        order_by="LogMessage.id",
    )

    @classmethod
    def new(cls, name: str) -> "Worker":
        """Build a worker ready to be inserted."""
        return cls(name=_require_name("Worker", name))

    def __repr__(self) -> str:
        return f"Worker(id={self.id}, name={self.name!r})"


class Job(TimestampMixin, Base):
    """
    Job model representing a unit of work in the queue.

    This is the authoritative source of truth for job state.

    Key constraints:
    - status only moves waiting -> running -> finished
    - worker_id is set if and only if the job is running or finished
    - priority and in_data are written once, at insert
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Lower value = higher precedence
    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_PRIORITY,
    )
    status: Mapped[JobStatus] = mapped_column(
        Enum(
            JobStatus,
            name="job_status",
            create_constraint=True,
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=JobStatus.WAITING,
        index=True,
    )

    in_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    out_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Claimant
    worker_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("workers.id"),
        nullable=True,
        index=True,
    )

    worker: Mapped[Worker | None] = relationship(
        back_populates="jobs",
        lazy="raise",
    )
    log_messages: Mapped[list["LogMessage"]] = relationship(
        back_populates="job",
        lazy="raise",
        order_by="LogMessage.id",
    )

    __table_args__ = (
        # Claim order: status filter, then priority, age, id
        Index("ix_jobs_claim_order", "status", "priority", "created_at", "id"),
        CheckConstraint(
            "(status = 'waiting' AND worker_id IS NULL) "
            "OR (status != 'waiting' AND worker_id IS NOT NULL)",
            name="ck_jobs_owner_matches_status",
        ),
    )

    @classmethod
    def new(
        cls,
        name: str,
        in_data: str | None = None,
        priority: int | None = None,
    ) -> "Job":
        """Build a waiting, unowned job ready to be inserted."""
        return cls(
            name=_require_name("Job", name),
            in_data=in_data,
            priority=DEFAULT_PRIORITY if priority is None else priority,
            status=JobStatus.WAITING,
            worker_id=None,
        )

    def __repr__(self) -> str:
        return (
            f"Job(id={self.id}, name={self.name!r}, status={self.status}, "
            f"priority={self.priority}, worker_id={self.worker_id})"
        )


class LogMessage(TimestampMixin, Base):
    """
    Append-only progress note written by a worker against a job.

    Both references are mandatory and fixed at creation.
    """

    __tablename__ = "log_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    job_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("jobs.id"),
        nullable=False,
        index=True,
    )
    worker_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("workers.id"),
        nullable=False,
        index=True,
    )

    job: Mapped[Job] = relationship(back_populates="log_messages", lazy="raise")
    worker: Mapped[Worker] = relationship(back_populates="log_messages", lazy="raise")

    @classmethod
    def new(cls, job_id: int, worker_id: int, text: str) -> "LogMessage":
        """Build a log message linked to an existing job and worker."""
        if text is None:
            raise InvalidInputError("Log message text is required")
        return cls(job_id=job_id, worker_id=worker_id, text=text)

    def __repr__(self) -> str:
        return f"LogMessage(id={self.id}, job_id={self.job_id}, worker_id={self.worker_id})"
