"""
Auth router — the signed-in caller's own account.

GET /auth/me   — provision on first call, record the sign-in, return the profile
PUT /auth/me   — edit profile fields (name, job title, experience, stack, bio)

Sign-in itself happens against the identity provider; this API only
ever sees the resulting bearer token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.dependencies import CurrentUser
from projectify.core.database import get_db_session
from projectify.schemas.user import ProfileUpdate, UserEnvelope, UserOut
from projectify.services.change_feed import COLLECTION_USERS, ChangeEvent, ChangeFeed, get_change_feed
from projectify.services.users import record_sign_in, update_profile

router = APIRouter(tags=["Auth"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]


@router.get("/me", response_model=UserEnvelope, summary="Current user's profile")
async def get_me(session: DbSession, user: CurrentUser) -> UserEnvelope:
    user = await record_sign_in(session, user)
    return UserEnvelope(user=UserOut.model_validate(user))


@router.put("/me", response_model=UserEnvelope, summary="Update the current user's profile")
async def update_me(
    payload: ProfileUpdate,
    session: DbSession,
    user: CurrentUser,
    feed: Feed,
) -> UserEnvelope:
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = await update_profile(session, user, changes)
    feed.publish(ChangeEvent(COLLECTION_USERS, user.id, "updated", owner_id=user.id))
    return UserEnvelope(
        message="Profile updated successfully",
        user=UserOut.model_validate(user),
    )
