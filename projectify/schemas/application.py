"""
Pydantic v2 schemas for applications.

Separation:
  • ApplicationCreate — what the APPLICANT sends.
  • ApplicationOut    — what the SERVER returns after persistence.

Applicant identity (userId, userName, userEmail) and status are never
accepted from the client; they come from the verified token and the
workflow respectively.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import ConfigDict, Field

from projectify.schemas.common import CamelModel, Envelope


# ── Request schemas ─────────────────────────────────────────
class ApplicationCreate(CamelModel):
    """Payload accepted by POST /applications."""

    model_config = ConfigDict(str_strip_whitespace=True)

    project_id: uuid.UUID = Field(
        ...,
        description="Project being applied to.",
    )
    username: str = Field(
        ...,
        min_length=2,
        max_length=50,
        examples=["jane.dev"],
    )
    contact: str = Field(
        ...,
        min_length=1,
        max_length=255,
        examples=["jane@example.com"],
    )
    skills_description: str = Field(
        ...,
        min_length=10,
        max_length=500,
        examples=["Python, FastAPI, PostgreSQL, five years of backend work"],
    )
    experience: str = Field(
        ...,
        min_length=1,
        max_length=255,
        examples=["3-5 years"],
    )
    deadline: int = Field(
        ...,
        ge=1,
        examples=[14],
        description="Self-reported delivery time in days.",
    )


class ApplicationStatusUpdate(CamelModel):
    """
    Body for PUT /applications/{id}/status.

    `status` is a plain string on purpose: values outside
    {approved, rejected} are rejected by the workflow as InvalidArgument.
    """

    status: str


# ── Response schemas ────────────────────────────────────────
class ApplicationOut(CamelModel):
    """Full application record."""

    id: uuid.UUID
    project_id: uuid.UUID
    project_title: str
    user_id: str
    user_name: str
    user_email: str
    username: str
    contact: str
    skills_description: str
    experience: str
    deadline: int
    status: str
    applied_at: datetime
    updated_at: datetime


class ApplicationEnvelope(Envelope):
    application: ApplicationOut


class ApplicationListEnvelope(Envelope):
    applications: list[ApplicationOut]
    total: int
