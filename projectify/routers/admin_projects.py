"""
Admin project router — publication and lifecycle.

POST /admin-projects
  1. Validates the payload (Pydantic).
  2. Persists the project as `active` and commits.
  3. Emails every user about it (settle-all, never fails the request).
  4. Returns the project with the notification tally, 201 Created.

GET  /admin-projects/test-email       — send one sample notification
PUT  /admin-projects/{id}/status      — move through the project lifecycle
"""

import logging
import uuid
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.dependencies import AdminUser
from projectify.core.database import get_db_session
from projectify.core.errors import DependencyFailure
from projectify.schemas.project import (
    EmailCheckEnvelope,
    NotificationSummaryOut,
    ProjectCreate,
    ProjectEnvelope,
    ProjectOut,
    ProjectStatusUpdate,
    PublishedProjectEnvelope,
    PublishedProjectOut,
)
from projectify.services.change_feed import (
    COLLECTION_PROJECTS,
    ChangeEvent,
    ChangeFeed,
    get_change_feed,
)
from projectify.services.mailer import Mailer, get_mailer
from projectify.services.projects import (
    publish_project,
    send_test_notification,
    transition_project_status,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin Projects"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]


@router.post(
    "",
    response_model=PublishedProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a project and notify all users",
    description=(
        "Creates an immediately visible project and emails every user. "
        "Email failures are reported in `notifications`, never as an error."
    ),
)
async def create_admin_project(
    payload: ProjectCreate,
    session: DbSession,
    admin: AdminUser,
    mailer: MailerDep,
    feed: Feed,
) -> PublishedProjectEnvelope:
    project, summary = await publish_project(session, mailer, admin, payload)
    feed.publish(ChangeEvent(COLLECTION_PROJECTS, str(project.id), "created"))

    published = PublishedProjectOut(
        **ProjectOut.model_validate(project).model_dump(),
        notifications=NotificationSummaryOut(**asdict(summary)),
    )
    return PublishedProjectEnvelope(
        message="Project created successfully and notifications sent",
        project=published,
    )


@router.get(
    "/test-email",
    response_model=EmailCheckEnvelope,
    summary="Send a sample job notification to the first user",
)
async def send_test_email(
    session: DbSession,
    _admin: AdminUser,
    mailer: MailerDep,
) -> EmailCheckEnvelope:
    if not mailer.enabled:
        return EmailCheckEnvelope(
            success=False,
            message="Email is not configured; nothing was sent",
            total_users=0,
        )

    try:
        sent_to, total_users = await send_test_notification(session, mailer)
    except Exception as exc:
        logger.exception("Test email failed")
        raise DependencyFailure("Test email failed") from exc

    if sent_to is None:
        return EmailCheckEnvelope(
            success=False,
            message="No users found for testing",
            total_users=0,
        )
    return EmailCheckEnvelope(
        message="Test email sent successfully",
        sent_to=sent_to,
        total_users=total_users,
    )


@router.put(
    "/{project_id}/status",
    response_model=ProjectEnvelope,
    summary="Change a project's lifecycle status",
)
async def update_project_status(
    project_id: uuid.UUID,
    payload: ProjectStatusUpdate,
    session: DbSession,
    _admin: AdminUser,
    feed: Feed,
) -> ProjectEnvelope:
    project = await transition_project_status(session, project_id, payload.status)
    feed.publish(ChangeEvent(COLLECTION_PROJECTS, str(project.id), "updated"))
    return ProjectEnvelope(
        message=f"Project status updated to {project.status}",
        project=ProjectOut.model_validate(project),
    )
