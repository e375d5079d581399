"""
Application model — one user's request to join a project.

Design notes:
  • uq_applications_project_user is the authority on duplicates.
    The service still pre-checks, but two concurrent submissions can
    both pass that read; only one survives the commit.
  • Applicant name/email and project title are denormalised so that
    status notifications never need a second lookup.
  • Status: pending → approved | rejected. Both are terminal.
"""

import datetime
import uuid

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from projectify.core.database import Base, utcnow

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

# Targets an administrator may move a pending application to.
DECISION_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)


class Application(Base):
    """A pending or decided application."""

    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    project_title: Mapped[str] = mapped_column(String(100), nullable=False)

    # ── Applicant identity ──────────────────────────────────
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Submitted fields ────────────────────────────────────
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    contact: Mapped[str] = mapped_column(String(255), nullable=False)
    skills_description: Mapped[str] = mapped_column(Text, nullable=False)
    experience: Mapped[str] = mapped_column(Text, nullable=False)
    deadline: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=STATUS_PENDING,
    )
    applied_at: Mapped[datetime.datetime] = mapped_column(
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
    )

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_applications_project_user"),
        CheckConstraint("deadline >= 1", name="ck_applications_deadline_positive"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_applications_status_valid",
        ),
        Index("ix_applications_user_id", "user_id"),
        Index("ix_applications_applied_at", "applied_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application id={self.id!s:.8} project={self.project_id!s:.8} "
            f"user={self.user_id} status={self.status}>"
        )
