"""
Identity provider client — turns a bearer token into a verified identity.

Production uses Firebase Authentication. Tokens are verified by the
Identity Toolkit `accounts:lookup` endpoint via httpx, which returns the
account (uid, email, display name) only for a valid, unexpired ID token.

Configuration:
  FIREBASE_API_KEY — web API key of the Firebase project (server-side)

Failure mapping:
  • token rejected / unknown account   → AuthenticationError (401)
  • provider unreachable or 5xx        → DependencyFailure (500)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from fastapi import Request

from projectify.auth.errors import AuthenticationError
from projectify.core.config import Settings
from projectify.core.errors import DependencyFailure

logger = logging.getLogger(__name__)

_LOOKUP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:lookup"


@dataclass(frozen=True, slots=True)
class Identity:
    """Verified caller identity as reported by the provider."""

    uid: str
    email: str
    name: str


class IdentityProvider(Protocol):
    async def verify_token(self, token: str) -> Identity:
        """Return the identity behind `token` or raise AuthenticationError."""
        ...


class FirebaseIdentityProvider:
    """Verifies Firebase ID tokens through the Identity Toolkit REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def verify_token(self, token: str) -> Identity:
        if not self._api_key:
            raise DependencyFailure("Identity provider is not configured.")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    _LOOKUP_URL,
                    params={"key": self._api_key},
                    json={"idToken": token},
                )
        except httpx.HTTPError as exc:
            logger.error("Identity provider request failed: %s", exc)
            raise DependencyFailure("Identity provider is unavailable.") from exc

        # 400 is how the toolkit reports INVALID_ID_TOKEN / TOKEN_EXPIRED
        if response.status_code == 400:
            raise AuthenticationError("Identity provider rejected the token.")

        if response.status_code != 200:
            logger.error(
                "Identity provider error: status=%d body=%s",
                response.status_code,
                response.text[:500],
            )
            raise DependencyFailure("Identity provider returned an error.")

        try:
            accounts = response.json().get("users") or []
        except ValueError as exc:
            raise DependencyFailure("Identity provider returned malformed data.") from exc

        if not accounts:
            raise AuthenticationError("No account for token.")

        account = accounts[0]
        email = account.get("email", "")
        return Identity(
            uid=account["localId"],
            email=email,
            name=account.get("displayName") or email.split("@")[0] or "User",
        )


def build_identity_provider(config: Settings) -> IdentityProvider:
    if not config.FIREBASE_API_KEY:
        logger.warning("FIREBASE_API_KEY not configured. Authenticated routes will fail.")
    return FirebaseIdentityProvider(config.FIREBASE_API_KEY)


def get_identity_provider(request: Request) -> IdentityProvider:
    """FastAPI dependency — the provider built in the lifespan."""
    return request.app.state.identity_provider
