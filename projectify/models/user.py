"""
User model — one platform account.

The primary key is the identity provider's uid, so a record can be
provisioned the first time a verified token is seen.
"""

import datetime

from sqlalchemy import CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from projectify.core.database import Base, utcnow

ROLE_ADMIN = "admin"
ROLE_USER = "user"

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_PENDING = "pending"

USER_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_PENDING)


class User(Base):
    """Account with role, status, and profile fields."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(10), nullable=False, default=ROLE_USER)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=STATUS_ACTIVE)

    # ── Profile ─────────────────────────────────────────────
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    experience: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tech_stack: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

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
    last_login: Mapped[datetime.datetime | None] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_users_role_valid"),
        CheckConstraint(
            "status IN ('active', 'inactive', 'pending')",
            name="ck_users_status_valid",
        ),
        Index("ix_users_role_status", "role", "status"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
