"""
Team model — a named, ordered group of users.

Members are stored inline as a JSON list of {"userId", "userName"}
objects, so a team is written as one record.
"""

import datetime
import uuid
from typing import Any

from sqlalchemy import JSON, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from projectify.core.database import Base, utcnow

DEFAULT_MAX_MEMBERS = 5


class Team(Base):
    """Named grouping of users, capped at creation time."""

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    team_name: Mapped[str] = mapped_column(String(100), nullable=False)
    members: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    max_members: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=DEFAULT_MAX_MEMBERS,
    )
    created_by: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Team id={self.id!s:.8} name={self.team_name!r} members={len(self.members)}>"
