"""
Project publication flow and project administration.

publish_project():
  1. Persist the project as `active` and commit — the project exists
     before anyone is told about it.
  2. Fan out "new project" emails to every role=user account.
  3. Attach the tally to the result.

Step 2 can never fail step 1: any exception from the notification
layer (including the recipient query) becomes a summary with
emails_failed = total_users and an `error` string.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.core.database import commit_or_fail, utcnow
from projectify.core.errors import InvalidArgument, InvalidState, NotFound
from projectify.models.project import (
    PROJECT_STATUSES,
    PROJECT_TRANSITIONS,
    STATUS_ACTIVE,
    STATUS_PENDING,
    Project,
)
from projectify.models.user import User
from projectify.schemas.project import ProjectCreate
from projectify.services.mailer import Mailer
from projectify.services.notifications import (
    NotificationSummary,
    Recipient,
    notify_new_project,
    send_job_notification,
)
from projectify.services.users import list_notification_recipients

logger = logging.getLogger(__name__)


async def create_project(
    session: AsyncSession,
    creator: User,
    payload: ProjectCreate,
    *,
    status: str = STATUS_PENDING,
) -> Project:
    """Persist a project attributed to `creator`. No notifications."""
    project = Project(
        title=payload.title,
        role=payload.role,
        description=payload.description,
        timeline=payload.timeline,
        deadline_to_apply=payload.deadline_to_apply,
        project_details=payload.project_details,
        status=status,
        created_by=creator.id,
        created_by_email=creator.email,
    )
    session.add(project)
    await commit_or_fail(session, "create project")
    logger.info("Project %s created with status %s by %s", project.id, status, creator.id)
    return project


async def publish_project(
    session: AsyncSession,
    mailer: Mailer,
    creator: User,
    payload: ProjectCreate,
) -> tuple[Project, NotificationSummary]:
    """Create an immediately visible project and notify all users."""

    # ── 1. Persist (commits before any email) ───────────────
    project = await create_project(session, creator, payload, status=STATUS_ACTIVE)

    # ── 2. Fan-out (never fails the creation) ───────────────
    recipients: list[Recipient] = []
    try:
        users = await list_notification_recipients(session)
        recipients = [Recipient(email=u.email, name=u.name) for u in users]
        summary = await notify_new_project(mailer, recipients, project)
    except Exception as exc:
        logger.exception("Job notifications for project %s failed", project.id)
        summary = NotificationSummary(
            total_users=len(recipients),
            emails_sent=0,
            emails_failed=len(recipients),
            error=str(exc) or exc.__class__.__name__,
        )

    return project, summary


async def list_projects(
    session: AsyncSession,
    statuses: Iterable[str] | None = None,
) -> list[Project]:
    """Projects newest first, optionally restricted to `statuses`."""
    stmt = select(Project)
    if statuses is not None:
        stmt = stmt.where(Project.status.in_(list(statuses)))
    result = await session.execute(stmt.order_by(Project.created_at.desc()))
    return list(result.scalars().all())


async def get_project(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found")
    return project


async def transition_project_status(
    session: AsyncSession,
    project_id: uuid.UUID,
    status: str,
) -> Project:
    """
    Admin-driven lifecycle move (see PROJECT_TRANSITIONS).

    Raises:
        InvalidArgument: unknown status value.
        NotFound:        project does not exist.
        InvalidState:    transition not allowed from the current status.
    """
    if status not in PROJECT_STATUSES:
        raise InvalidArgument(
            "Invalid status. Must be one of: " + ", ".join(PROJECT_STATUSES)
        )

    project = await get_project(session, project_id)
    allowed = PROJECT_TRANSITIONS.get(project.status, frozenset())
    if status not in allowed:
        raise InvalidState(f"Cannot move a {project.status} project to {status}")

    project.status = status
    project.updated_at = utcnow()
    await commit_or_fail(session, "update project status")
    logger.info("Project %s moved to %s", project.id, status)
    return project


async def send_test_notification(
    session: AsyncSession,
    mailer: Mailer,
) -> tuple[str | None, int]:
    """
    Send one sample "new project" email to the first eligible user.

    Returns (recipient email or None, number of eligible users).
    Send errors propagate so the caller can report them.
    """
    users = await list_notification_recipients(session)
    if not users:
        return None, 0

    sample = Project(
        title="Test Project",
        role="Test Role",
        description="This is a test project for email verification",
        timeline="1 week",
        deadline_to_apply=datetime.date.today() + datetime.timedelta(days=30),
    )
    target = users[0]
    await send_job_notification(mailer, Recipient(email=target.email, name=target.name), sample)
    logger.info("Test job notification sent to %s", target.email)
    return target.email, len(users)
