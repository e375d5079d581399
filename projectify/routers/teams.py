"""Teams router — POST /teams and GET /teams (admin)."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.dependencies import AdminUser
from projectify.core.database import get_db_session
from projectify.schemas.team import TeamCreate, TeamEnvelope, TeamListEnvelope, TeamOut
from projectify.services.change_feed import COLLECTION_TEAMS, ChangeEvent, ChangeFeed, get_change_feed
from projectify.services.teams import create_team, list_teams

router = APIRouter(tags=["Teams"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]


@router.post(
    "",
    response_model=TeamEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
)
async def post_team(
    payload: TeamCreate,
    session: DbSession,
    admin: AdminUser,
    feed: Feed,
) -> TeamEnvelope:
    team = await create_team(session, admin, payload)
    feed.publish(ChangeEvent(COLLECTION_TEAMS, str(team.id), "created", owner_id=admin.id))
    return TeamEnvelope(message="Team created successfully", team=TeamOut.model_validate(team))


@router.get("", response_model=TeamListEnvelope, summary="List teams")
async def get_teams(session: DbSession, _admin: AdminUser) -> TeamListEnvelope:
    teams = await list_teams(session)
    return TeamListEnvelope(
        teams=[TeamOut.model_validate(t) for t in teams],
        total=len(teams),
    )
