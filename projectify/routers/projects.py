"""
Projects router — the project board as seen by users and admins.

Visibility:
  • Admins see every project and may filter by status.
  • Users see open projects only (active, or the legacy "approved").
  • `projectDetails` is returned to admins and to users holding an
    approved application for that project; everyone else gets null.

Endpoints:
  GET  /projects            — list
  GET  /projects/stream     — live list (SSE)
  GET  /projects/{id}       — one project
  POST /projects            — create a pending project (admin)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from projectify.auth.dependencies import AdminUser, CurrentUser
from projectify.core.database import get_db_session, get_session_factory
from projectify.core.errors import NotFound
from projectify.core.sse import snapshot_stream
from projectify.models.project import OPEN_STATUSES, STATUS_PENDING, Project
from projectify.models.user import User
from projectify.schemas.project import (
    ProjectCreate,
    ProjectEnvelope,
    ProjectListEnvelope,
    ProjectOut,
)
from projectify.services.applications import approved_project_ids, has_approved_application
from projectify.services.change_feed import (
    COLLECTION_PROJECTS,
    ChangeEvent,
    ChangeFeed,
    get_change_feed,
)
from projectify.services.projects import create_project, get_project, list_projects

router = APIRouter(tags=["Projects"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]


def project_view(project: Project, reveal_details: bool) -> ProjectOut:
    out = ProjectOut.model_validate(project)
    if not reveal_details:
        out = out.model_copy(update={"project_details": None})
    return out


async def _visible_projects(
    session: AsyncSession,
    user: User,
    status_filter: str | None = None,
) -> ProjectListEnvelope:
    if user.is_admin:
        projects = await list_projects(session, [status_filter] if status_filter else None)
        views = [project_view(p, True) for p in projects]
    else:
        projects = await list_projects(session, OPEN_STATUSES)
        revealed = await approved_project_ids(session, user.id)
        views = [project_view(p, p.id in revealed) for p in projects]
    return ProjectListEnvelope(projects=views, total=len(views))


@router.get(
    "",
    response_model=ProjectListEnvelope,
    summary="List projects visible to the caller",
)
async def get_projects(
    session: DbSession,
    user: CurrentUser,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> ProjectListEnvelope:
    return await _visible_projects(session, user, status_filter)


@router.get(
    "/stream",
    summary="Live project list",
    description="Server-sent events. Re-sends the visible list on every project change.",
)
async def stream_projects(
    user: CurrentUser,
    feed: Feed,
    session_factory: SessionFactory,
) -> StreamingResponse:
    async def load_snapshot() -> str:
        async with session_factory() as session:
            envelope = await _visible_projects(session, user)
        return envelope.model_dump_json(by_alias=True)

    return StreamingResponse(
        snapshot_stream(feed, COLLECTION_PROJECTS, load_snapshot),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get(
    "/{project_id}",
    response_model=ProjectEnvelope,
    summary="Get one project",
)
async def get_project_by_id(
    project_id: uuid.UUID,
    session: DbSession,
    user: CurrentUser,
) -> ProjectEnvelope:
    project = await get_project(session, project_id)
    if user.is_admin:
        return ProjectEnvelope(project=project_view(project, True))

    # Non-open projects do not exist as far as users are concerned
    if project.status not in OPEN_STATUSES:
        raise NotFound("Project not found")
    reveal = await has_approved_application(session, project.id, user.id)
    return ProjectEnvelope(project=project_view(project, reveal))


@router.post(
    "",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a pending project (admin)",
    description="Stores the project without notifying anyone. Use /admin-projects to publish.",
)
async def create_pending_project(
    payload: ProjectCreate,
    session: DbSession,
    admin: AdminUser,
    feed: Feed,
) -> ProjectEnvelope:
    project = await create_project(session, admin, payload, status=STATUS_PENDING)
    feed.publish(ChangeEvent(COLLECTION_PROJECTS, str(project.id), "created"))
    return ProjectEnvelope(
        message="Project created successfully",
        project=project_view(project, True),
    )
