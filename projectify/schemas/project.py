"""
Pydantic v2 schemas for projects and the publication flow.

Length bounds for project fields live here, not in the service layer:
the workflow only cares about status, the API cares about shape.
"""

from __future__ import annotations

import datetime
import uuid

from pydantic import ConfigDict, Field

from projectify.schemas.common import CamelModel, Envelope


# ── Request schemas ─────────────────────────────────────────
class ProjectCreate(CamelModel):
    """Payload accepted by POST /admin-projects and POST /projects."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=100, examples=["API Gateway"])
    role: str = Field(..., min_length=2, max_length=100, examples=["Backend Engineer"])
    description: str = Field(
        ...,
        min_length=10,
        max_length=1000,
        examples=["Build a gateway service"],
    )
    timeline: str = Field(..., min_length=2, max_length=100, examples=["4 weeks"])
    deadline_to_apply: datetime.date = Field(..., examples=["2025-01-01"])
    project_details: str | None = Field(
        default=None,
        min_length=10,
        max_length=2000,
        description="Detailed requirements, revealed to approved applicants only.",
    )


class ProjectStatusUpdate(CamelModel):
    """Body for PUT /admin-projects/{id}/status."""

    status: str


# ── Response schemas ────────────────────────────────────────
class ProjectOut(CamelModel):
    """Project as seen by the caller (details may be withheld)."""

    id: uuid.UUID
    title: str
    role: str
    description: str
    timeline: str
    deadline_to_apply: datetime.date
    project_details: str | None = None
    status: str
    created_by: str
    created_by_email: str
    created_at: datetime.datetime
    updated_at: datetime.datetime


class NotificationSummaryOut(CamelModel):
    """Outcome of the new-project email fan-out."""

    total_users: int
    emails_sent: int
    emails_failed: int
    error: str | None = None


class PublishedProjectOut(ProjectOut):
    notifications: NotificationSummaryOut


class ProjectEnvelope(Envelope):
    project: ProjectOut


class PublishedProjectEnvelope(Envelope):
    project: PublishedProjectOut


class ProjectListEnvelope(Envelope):
    projects: list[ProjectOut]
    total: int


class EmailCheckEnvelope(Envelope):
    sent_to: str | None = None
    total_users: int
