"""
Application workflow — submission and the approval/rejection state machine.

State machine:
  pending ──► approved
     └──────► rejected
  Both destinations are terminal. Any further transition is InvalidState.

Duplicate guard:
  The pre-insert existence check gives a clean error in the common case.
  The unique constraint (project_id, user_id) is the real guarantee:
  a concurrent duplicate that slips past the check fails at commit and
  is reported as the same Conflict. Any other integrity error is a
  DependencyFailure.

Notifications are NOT sent here. transition_status() commits and
returns; the router schedules the email after the response.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.core.database import commit_or_fail, utcnow
from projectify.core.errors import (
    Conflict,
    DependencyFailure,
    InvalidArgument,
    InvalidState,
    NotFound,
)
from projectify.models.application import (
    DECISION_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
    Application,
)
from projectify.models.project import OPEN_STATUSES, Project
from projectify.models.user import User
from projectify.schemas.application import ApplicationCreate

logger = logging.getLogger(__name__)

_DUPLICATE_MESSAGE = "You have already applied to this project"

# Postgres names the constraint; SQLite only lists the columns.
_DUPLICATE_MARKERS = (
    "uq_applications_project_user",
    "UNIQUE constraint failed: applications.project_id, applications.user_id",
)


def _is_duplicate_violation(exc: IntegrityError) -> bool:
    detail = str(exc.orig)
    return any(marker in detail for marker in _DUPLICATE_MARKERS)


async def submit_application(
    session: AsyncSession,
    applicant: User,
    payload: ApplicationCreate,
) -> Application:
    """
    Create a pending application for `applicant` on `payload.project_id`.

    Raises:
        NotFound:     project does not exist.
        InvalidState: project is not open for applications.
        Conflict:     applicant already applied to this project.
    """

    # ── 1. Project must exist and be open ───────────────────
    project = await session.get(Project, payload.project_id)
    if project is None:
        raise NotFound("Project not found")

    if project.status not in OPEN_STATUSES:
        raise InvalidState("Cannot apply to a project that is not open for applications")

    # ── 2. Fast-path duplicate check ────────────────────────
    stmt = select(Application.id).where(
        Application.project_id == project.id,
        Application.user_id == applicant.id,
    )
    if (await session.execute(stmt)).first() is not None:
        raise Conflict(_DUPLICATE_MESSAGE)

    # ── 3. Insert; the unique constraint settles races ──────
    now = utcnow()
    application = Application(
        project_id=project.id,
        project_title=project.title,
        user_id=applicant.id,
        user_name=applicant.name,
        user_email=applicant.email,
        username=payload.username,
        contact=payload.contact,
        skills_description=payload.skills_description,
        experience=payload.experience,
        deadline=payload.deadline,
        status=STATUS_PENDING,
        applied_at=now,
        updated_at=now,
    )
    # Rollback expires every loaded instance; keep plain ids for logging.
    project_id, applicant_id = project.id, applicant.id
    session.add(application)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not _is_duplicate_violation(exc):
            logger.exception("Integrity error persisting application: project=%s", project_id)
            raise DependencyFailure("Failed to submit application.") from exc
        logger.info(
            "Duplicate application rejected at commit: project=%s user=%s",
            project_id,
            applicant_id,
        )
        raise Conflict(_DUPLICATE_MESSAGE) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to persist application")
        raise DependencyFailure("Failed to submit application.") from exc

    logger.info("Application %s submitted for project %s", application.id, project_id)
    return application


async def list_user_applications(
    session: AsyncSession,
    user_id: str,
) -> list[Application]:
    """The caller's own applications, newest first."""
    stmt = (
        select(Application)
        .where(Application.user_id == user_id)
        .order_by(Application.applied_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_applications(
    session: AsyncSession,
    project_id: uuid.UUID | None = None,
) -> list[Application]:
    """All applications (admin view), optionally for one project, newest first."""
    stmt = select(Application)
    if project_id is not None:
        stmt = stmt.where(Application.project_id == project_id)
    result = await session.execute(stmt.order_by(Application.applied_at.desc()))
    return list(result.scalars().all())


async def transition_status(
    session: AsyncSession,
    application_id: uuid.UUID,
    status: str,
) -> Application:
    """
    Move a pending application to approved or rejected.

    Validation happens before any read, so a bad status never touches
    the record.

    Raises:
        InvalidArgument: status not in {approved, rejected}.
        NotFound:        application does not exist.
        InvalidState:    application already decided.
    """
    if status not in DECISION_STATUSES:
        raise InvalidArgument("Invalid status. Must be approved or rejected")

    application = await session.get(Application, application_id)
    if application is None:
        raise NotFound("Application not found")

    if application.status != STATUS_PENDING:
        raise InvalidState(f"Application has already been {application.status}")

    application.status = status
    application.updated_at = utcnow()
    await commit_or_fail(session, "update application status")

    logger.info("Application %s %s", application.id, status)
    return application


async def has_approved_application(
    session: AsyncSession,
    project_id: uuid.UUID,
    user_id: str,
) -> bool:
    """True when `user_id` holds an approved application for `project_id`."""
    stmt = select(Application.id).where(
        Application.project_id == project_id,
        Application.user_id == user_id,
        Application.status == STATUS_APPROVED,
    )
    return (await session.execute(stmt)).first() is not None


async def approved_project_ids(session: AsyncSession, user_id: str) -> set[uuid.UUID]:
    """Projects whose details `user_id` may see."""
    stmt = select(Application.project_id).where(
        Application.user_id == user_id,
        Application.status == STATUS_APPROVED,
    )
    return set((await session.execute(stmt)).scalars().all())
