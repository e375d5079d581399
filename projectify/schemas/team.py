"""Pydantic v2 schemas for teams."""

from __future__ import annotations

import datetime
import uuid

from pydantic import ConfigDict, Field

from projectify.models.team import DEFAULT_MAX_MEMBERS
from projectify.schemas.common import CamelModel, Envelope


class TeamMember(CamelModel):
    user_id: str = Field(..., min_length=1)
    user_name: str = Field(..., min_length=1)


class TeamCreate(CamelModel):
    """Payload accepted by POST /teams."""

    model_config = ConfigDict(str_strip_whitespace=True)

    team_name: str = Field(..., min_length=1, max_length=100, examples=["Platform Squad"])
    members: list[TeamMember] = Field(..., min_length=1)
    max_members: int = Field(
        default=DEFAULT_MAX_MEMBERS,
        ge=1,
        le=50,
        description="Cap on member count, checked at creation only.",
    )


class TeamOut(CamelModel):
    id: uuid.UUID
    team_name: str
    members: list[TeamMember]
    max_members: int
    created_by: str
    created_at: datetime.datetime


class TeamEnvelope(Envelope):
    team: TeamOut


class TeamListEnvelope(Envelope):
    teams: list[TeamOut]
    total: int
