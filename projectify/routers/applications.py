"""
Applications router — submission, listings, and admin decisions.

Endpoints:
  POST /applications                 — apply to an open project
  GET  /applications/my              — caller's applications
  GET  /applications/my/stream       — live view of the above (SSE)
  GET  /applications                 — all applications (admin)
  PUT  /applications/{id}/approve    — approve (admin)
  PUT  /applications/{id}/reject     — reject (admin)
  PUT  /applications/{id}/status     — approve/reject by body (admin)

Decision emails are scheduled as background tasks, so they run only
after the status change is committed and the response is sent.
"""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectify.auth.dependencies import AdminUser, CurrentUser
from projectify.core.database import get_db_session, get_session_factory
from projectify.core.sse import snapshot_stream
from projectify.models.application import STATUS_APPROVED, STATUS_REJECTED, Application
from projectify.schemas.application import (
    ApplicationCreate,
    ApplicationEnvelope,
    ApplicationListEnvelope,
    ApplicationOut,
    ApplicationStatusUpdate,
)
from projectify.services.applications import (
    list_applications,
    list_user_applications,
    submit_application,
    transition_status,
)
from projectify.services.change_feed import (
    COLLECTION_APPLICATIONS,
    ChangeEvent,
    ChangeFeed,
    get_change_feed,
)
from projectify.services.mailer import Mailer, get_mailer
from projectify.services.notifications import notify_application_decision

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]


def _list_envelope(applications: list[Application]) -> ApplicationListEnvelope:
    return ApplicationListEnvelope(
        applications=[ApplicationOut.model_validate(a) for a in applications],
        total=len(applications),
    )


# ── 1. Submit ───────────────────────────────────────────────
@router.post(
    "",
    response_model=ApplicationEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to an open project",
)
async def create_application(
    payload: ApplicationCreate,
    session: DbSession,
    user: CurrentUser,
    feed: Feed,
) -> ApplicationEnvelope:
    application = await submit_application(session, user, payload)
    feed.publish(
        ChangeEvent(COLLECTION_APPLICATIONS, str(application.id), "created", owner_id=user.id)
    )
    return ApplicationEnvelope(
        message="Application submitted successfully",
        application=ApplicationOut.model_validate(application),
    )


# ── 2. Caller's applications ────────────────────────────────
@router.get(
    "/my",
    response_model=ApplicationListEnvelope,
    summary="Applications submitted by the caller",
)
async def get_my_applications(session: DbSession, user: CurrentUser) -> ApplicationListEnvelope:
    return _list_envelope(await list_user_applications(session, user.id))


@router.get(
    "/my/stream",
    summary="Live view of the caller's applications",
    description=(
        "Server-sent events. Sends the caller's applications immediately "
        "and again whenever one of them changes."
    ),
)
async def stream_my_applications(
    user: CurrentUser,
    feed: Feed,
    session_factory: SessionFactory,
) -> StreamingResponse:
    user_id = user.id

    async def load_snapshot() -> str:
        async with session_factory() as session:
            applications = await list_user_applications(session, user_id)
        return _list_envelope(applications).model_dump_json(by_alias=True)

    stream = snapshot_stream(
        feed,
        COLLECTION_APPLICATIONS,
        load_snapshot,
        lambda event: event.owner_id == user_id,
    )
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


# ── 3. Admin listing ────────────────────────────────────────
@router.get(
    "",
    response_model=ApplicationListEnvelope,
    summary="All applications (admin)",
)
async def get_all_applications(
    session: DbSession,
    _admin: AdminUser,
    project_id: Annotated[uuid.UUID | None, Query(alias="projectId")] = None,
) -> ApplicationListEnvelope:
    return _list_envelope(await list_applications(session, project_id))


# ── 4. Decisions ────────────────────────────────────────────
async def _decide(
    application_id: uuid.UUID,
    decision: str,
    session: AsyncSession,
    mailer: Mailer,
    feed: ChangeFeed,
    background_tasks: BackgroundTasks,
) -> ApplicationEnvelope:
    application = await transition_status(session, application_id, decision)

    feed.publish(
        ChangeEvent(
            COLLECTION_APPLICATIONS,
            str(application.id),
            "updated",
            owner_id=application.user_id,
        )
    )
    background_tasks.add_task(
        notify_application_decision,
        mailer,
        email=application.user_email,
        name=application.user_name,
        project_title=application.project_title,
        status=application.status,
    )

    return ApplicationEnvelope(
        message=f"Application {application.status} successfully",
        application=ApplicationOut.model_validate(application),
    )


@router.put(
    "/{application_id}/approve",
    response_model=ApplicationEnvelope,
    summary="Approve a pending application (admin)",
)
async def approve_application(
    application_id: uuid.UUID,
    session: DbSession,
    _admin: AdminUser,
    mailer: MailerDep,
    feed: Feed,
    background_tasks: BackgroundTasks,
) -> ApplicationEnvelope:
    return await _decide(
        application_id, STATUS_APPROVED, session, mailer, feed, background_tasks,
    )


@router.put(
    "/{application_id}/reject",
    response_model=ApplicationEnvelope,
    summary="Reject a pending application (admin)",
)
async def reject_application(
    application_id: uuid.UUID,
    session: DbSession,
    _admin: AdminUser,
    mailer: MailerDep,
    feed: Feed,
    background_tasks: BackgroundTasks,
) -> ApplicationEnvelope:
    return await _decide(
        application_id, STATUS_REJECTED, session, mailer, feed, background_tasks,
    )


@router.put(
    "/{application_id}/status",
    response_model=ApplicationEnvelope,
    summary="Approve or reject by status value (admin)",
)
async def update_application_status(
    application_id: uuid.UUID,
    payload: ApplicationStatusUpdate,
    session: DbSession,
    _admin: AdminUser,
    mailer: MailerDep,
    feed: Feed,
    background_tasks: BackgroundTasks,
) -> ApplicationEnvelope:
    return await _decide(
        application_id, payload.status, session, mailer, feed, background_tasks,
    )
