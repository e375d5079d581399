"""
User provisioning and administration.

Role policy:
  A user is an admin when their email is listed in ADMIN_EMAILS.
  The role is written on first sign-in, and a configured admin email
  is re-granted the role on later sign-ins. Removing an email from the
  list does not demote an existing record; demotion is a data change.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.identity import Identity
from projectify.core.database import commit_or_fail, utcnow
from projectify.core.errors import InvalidArgument, NotFound
from projectify.models.user import (
    ROLE_ADMIN,
    ROLE_USER,
    STATUS_ACTIVE,
    USER_STATUSES,
    User,
)

logger = logging.getLogger(__name__)


def resolve_role(email: str, admin_emails: frozenset[str]) -> str:
    """Role a freshly provisioned account receives."""
    return ROLE_ADMIN if email.strip().lower() in admin_emails else ROLE_USER


async def provision_user(
    session: AsyncSession,
    identity: Identity,
    admin_emails: frozenset[str],
) -> User:
    """
    Return the user record for `identity`, creating it on first sight.

    Two concurrent first requests can both miss the read; the loser's
    insert violates the primary key and it re-reads the winner's row.
    """
    user = await session.get(User, identity.uid)
    role = resolve_role(identity.email, admin_emails)

    if user is not None:
        if role == ROLE_ADMIN and user.role != ROLE_ADMIN:
            user.role = ROLE_ADMIN
            await commit_or_fail(session, "update user role")
            logger.info("Granted admin role to %s", user.id)
        return user

    user = User(
        id=identity.uid,
        name=identity.name,
        email=identity.email,
        role=role,
        status=STATUS_ACTIVE,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        existing = await session.get(User, identity.uid)
        if existing is None:
            raise
        return existing

    logger.info("Provisioned %s user %s", role, user.id)
    return user


async def record_sign_in(session: AsyncSession, user: User) -> User:
    user.last_login = utcnow()
    await commit_or_fail(session, "record sign-in")
    return user


async def update_profile(
    session: AsyncSession,
    user: User,
    changes: dict[str, Any],
) -> User:
    """Apply the provided profile fields; keys absent from `changes` are untouched."""
    for field in ("name", "job_title", "experience", "tech_stack", "bio"):
        if field in changes:
            setattr(user, field, changes[field])
    await commit_or_fail(session, "update profile")
    return user


async def list_users(session: AsyncSession) -> list[User]:
    """Non-admin accounts, newest first."""
    stmt = (
        select(User)
        .where(User.role == ROLE_USER)
        .order_by(User.created_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_notification_recipients(
    session: AsyncSession,
    *,
    active_only: bool = False,
) -> list[User]:
    """
    Users eligible for job notifications: role "user" with an email.

    The publication flow notifies every such user; the admin recipient
    listing additionally restricts to active accounts.
    """
    stmt = select(User).where(User.role == ROLE_USER, User.email != "")
    if active_only:
        stmt = stmt.where(User.status == STATUS_ACTIVE)
    result = await session.execute(stmt.order_by(User.created_at.asc()))
    return list(result.scalars().all())


async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def update_user_status(
    session: AsyncSession,
    user_id: str,
    status: str,
) -> User:
    if status not in USER_STATUSES:
        raise InvalidArgument("Invalid status. Must be active, inactive, or pending")

    user = await get_user(session, user_id)
    user.status = status
    await commit_or_fail(session, "update user status")
    logger.info("User %s status set to %s", user_id, status)
    return user


async def delete_user(session: AsyncSession, user_id: str) -> None:
    user = await get_user(session, user_id)
    await session.delete(user)
    await commit_or_fail(session, "delete user")
    logger.info("Deleted user %s", user_id)
