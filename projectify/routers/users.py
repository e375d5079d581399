"""
User administration router (admin only).

Endpoints:
  GET    /users               — all role=user accounts
  GET    /users/notify/job    — active accounts eligible for job emails
  GET    /users/{id}          — one account
  PUT    /users/{id}/status   — active | inactive | pending
  DELETE /users/{id}          — remove the account record
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.dependencies import AdminUser
from projectify.core.database import get_db_session
from projectify.models.user import User
from projectify.schemas.common import Envelope
from projectify.schemas.user import UserEnvelope, UserListEnvelope, UserOut, UserStatusUpdate
from projectify.services.change_feed import COLLECTION_USERS, ChangeEvent, ChangeFeed, get_change_feed
from projectify.services.users import (
    delete_user,
    get_user,
    list_notification_recipients,
    list_users,
    update_user_status,
)

router = APIRouter(tags=["Users"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Feed = Annotated[ChangeFeed, Depends(get_change_feed)]


def _list_envelope(users: list[User]) -> UserListEnvelope:
    return UserListEnvelope(
        users=[UserOut.model_validate(u) for u in users],
        total=len(users),
    )


@router.get("", response_model=UserListEnvelope, summary="List users")
async def get_users(session: DbSession, _admin: AdminUser) -> UserListEnvelope:
    return _list_envelope(await list_users(session))


# Registered before /{user_id} so "notify" is not taken for an id
@router.get(
    "/notify/job",
    response_model=UserListEnvelope,
    summary="Users who receive job notifications",
)
async def get_job_notification_recipients(
    session: DbSession,
    _admin: AdminUser,
) -> UserListEnvelope:
    return _list_envelope(await list_notification_recipients(session, active_only=True))


@router.get("/{user_id}", response_model=UserEnvelope, summary="Get one user")
async def get_user_by_id(user_id: str, session: DbSession, _admin: AdminUser) -> UserEnvelope:
    return UserEnvelope(user=UserOut.model_validate(await get_user(session, user_id)))


@router.put("/{user_id}/status", response_model=UserEnvelope, summary="Set a user's status")
async def set_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    session: DbSession,
    _admin: AdminUser,
    feed: Feed,
) -> UserEnvelope:
    user = await update_user_status(session, user_id, payload.status)
    feed.publish(ChangeEvent(COLLECTION_USERS, user.id, "updated", owner_id=user.id))
    return UserEnvelope(
        message="User status updated successfully",
        user=UserOut.model_validate(user),
    )


@router.delete("/{user_id}", response_model=Envelope, summary="Delete a user record")
async def remove_user(
    user_id: str,
    session: DbSession,
    _admin: AdminUser,
    feed: Feed,
) -> Envelope:
    await delete_user(session, user_id)
    feed.publish(ChangeEvent(COLLECTION_USERS, user_id, "deleted", owner_id=user_id))
    return Envelope(message="User deleted successfully")
