"""Pydantic v2 schemas for users and profiles."""

from __future__ import annotations

import datetime

from pydantic import ConfigDict, Field

from projectify.schemas.common import CamelModel, Envelope


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    status: str
    job_title: str | None = None
    experience: str | None = None
    tech_stack: str | None = None
    bio: str | None = None
    created_at: datetime.datetime
    last_login: datetime.datetime | None = None


class UserStatusUpdate(CamelModel):
    """Status is validated by the service against {active, inactive, pending}."""

    status: str


class ProfileUpdate(CamelModel):
    """Self-service profile edit. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=2, max_length=50)
    job_title: str | None = Field(default=None, max_length=100)
    experience: str | None = Field(default=None, max_length=100)
    tech_stack: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=1000)


class UserEnvelope(Envelope):
    user: UserOut


class UserListEnvelope(Envelope):
    users: list[UserOut]
    total: int
