"""
Project model — a posted work opportunity users can apply to.

Lifecycle:
  pending → active → completed, with cancelled reachable from
  pending or active. completed and cancelled are terminal.

`approved` is the status the legacy project-request flow used for
projects open to applications; rows carrying it are treated like
`active`. New rows never receive it.
"""

import datetime
import uuid

from sqlalchemy import CheckConstraint, Date, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from projectify.core.database import Base, utcnow

STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"
STATUS_APPROVED = "approved"  # legacy
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

PROJECT_STATUSES = (
    STATUS_PENDING,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
)

# Statuses under which applications are accepted and non-admins can see it.
OPEN_STATUSES = frozenset({STATUS_ACTIVE, STATUS_APPROVED})

# Admin-driven transitions; anything absent here is rejected.
PROJECT_TRANSITIONS: dict[str, frozenset[str]] = {
    STATUS_PENDING: frozenset({STATUS_ACTIVE, STATUS_CANCELLED}),
    STATUS_ACTIVE: frozenset({STATUS_COMPLETED, STATUS_CANCELLED}),
    STATUS_APPROVED: frozenset({STATUS_COMPLETED, STATUS_CANCELLED}),
    STATUS_COMPLETED: frozenset(),
    STATUS_CANCELLED: frozenset(),
}


class Project(Base):
    """One posted project."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    timeline: Mapped[str] = mapped_column(String(100), nullable=False)
    deadline_to_apply: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    # Revealed to an applicant only once their application is approved.
    project_details: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=STATUS_PENDING,
    )
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_by_email: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'active', 'approved', 'completed', 'cancelled')",
            name="ck_projects_status_valid",
        ),
        Index("ix_projects_status", "status"),
        Index("ix_projects_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id!s:.8} title={self.title!r} status={self.status}>"
