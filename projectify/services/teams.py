"""Team creation and listing."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.core.database import commit_or_fail
from projectify.core.errors import InvalidArgument
from projectify.models.team import Team
from projectify.models.user import User
from projectify.schemas.team import TeamCreate

logger = logging.getLogger(__name__)


async def create_team(
    session: AsyncSession,
    creator: User,
    payload: TeamCreate,
) -> Team:
    """
    Persist a team as one record.

    Name and non-empty member list are enforced by the schema; the
    member cap and duplicate members are checked here. Team names
    are not unique.
    """
    if len(payload.members) > payload.max_members:
        raise InvalidArgument(f"Maximum {payload.max_members} members allowed")

    member_ids = [m.user_id for m in payload.members]
    if len(set(member_ids)) != len(member_ids):
        raise InvalidArgument("A user can only be added to a team once")

    team = Team(
        team_name=payload.team_name,
        members=[m.model_dump(by_alias=True) for m in payload.members],
        max_members=payload.max_members,
        created_by=creator.id,
    )
    session.add(team)
    await commit_or_fail(session, "create team")
    logger.info("Team %s created with %d members", team.id, len(member_ids))
    return team


async def list_teams(session: AsyncSession) -> list[Team]:
    stmt = select(Team).order_by(Team.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())
