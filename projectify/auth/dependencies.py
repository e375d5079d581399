"""
FastAPI dependencies for bearer-token authentication and role checks.

Flow:
  1. Extract Bearer token from Authorization header
  2. Verify it with the identity provider → Identity(uid, email, name)
  3. Provision the user record on first sight
  4. (admin routes) require role == "admin"

Security:
  • Generic 401 for ALL token failure modes (missing, malformed, rejected)
  • Raw tokens are NEVER logged
  • Role comes from the stored user record, not from the token
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from projectify.auth.errors import AuthenticationError, AuthorizationError
from projectify.auth.identity import Identity, IdentityProvider, get_identity_provider
from projectify.core.config import settings
from projectify.core.database import get_db_session
from projectify.models.user import User
from projectify.services.users import provision_user

logger = logging.getLogger(__name__)

# Same message for all token failures to avoid leaking which check failed
_AUTH_FAILED_MESSAGE = "Invalid or missing authentication token."


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthenticationError(_AUTH_FAILED_MESSAGE)

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthenticationError(_AUTH_FAILED_MESSAGE)

    return parts[1].strip()


async def get_current_identity(
    authorization: str | None = Header(default=None, alias="Authorization"),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Resolve the bearer token to a verified Identity."""
    token = _extract_bearer(authorization)
    try:
        return await provider.verify_token(token)
    except AuthenticationError:
        raise AuthenticationError(_AUTH_FAILED_MESSAGE) from None


async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """
    The caller's user record, created on first authenticated request.

    Usage in routers:
        CurrentUser = Annotated[User, Depends(get_current_user)]
    """
    return await provision_user(session, identity, settings.admin_emails)


async def require_admin(
    user: User = Depends(get_current_user),
) -> User:
    """Admin-only gate. Returns the admin's user record."""
    if not user.is_admin:
        logger.info("Non-admin %s denied access to admin route", user.id)
        raise AuthorizationError("Admin access required.")
    return user


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
