"""
Shared fixtures.

The app runs against an in-memory SQLite database (aiosqlite) swapped
in through dependency overrides. Identity and email are replaced by a
token table and a recording mailer, so no network is touched.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ADMIN_EMAILS"] = '["admin@projectify.dev"]'
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

import datetime
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from projectify.auth.errors import AuthenticationError
from projectify.auth.identity import Identity, get_identity_provider
from projectify.core.database import Base, get_db_session, get_session_factory
from projectify.main import app
from projectify.models.project import STATUS_ACTIVE, Project
from projectify.services.mailer import get_mailer

ADMIN = Identity(uid="admin-uid", email="admin@projectify.dev", name="Ada Admin")
ALICE = Identity(uid="alice-uid", email="alice@example.com", name="Alice")
BOB = Identity(uid="bob-uid", email="bob@example.com", name="Bob")

TOKENS = {
    "admin-token": ADMIN,
    "alice-token": ALICE,
    "bob-token": BOB,
}


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class FakeIdentityProvider:
    def __init__(self, tokens: dict[str, Identity]) -> None:
        self.tokens = dict(tokens)

    async def verify_token(self, token: str) -> Identity:
        try:
            return self.tokens[token]
        except KeyError:
            raise AuthenticationError("unknown token") from None


class RecordingMailer:
    """Mailer double: records sends, fails for addresses in `fail_for`."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.fail_for: set[str] = set()
        self.sent: list[tuple[str, str, str]] = []

    async def send(self, to: str, subject: str, html: str) -> None:
        if to in self.fail_for:
            raise OSError(f"connection refused for {to}")
        self.sent.append((to, subject, html))

    def subjects_for(self, to: str) -> list[str]:
        return [subject for addr, subject, _ in self.sent if addr == to]


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider(TOKENS)


@pytest.fixture
def engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def client(engine, session_factory, mailer, identity_provider):
    async def override_session():
        async with session_factory() as session:
            yield session

    async def create_tables() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose() -> None:
        await engine.dispose()

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    with TestClient(app) as test_client:
        test_client.portal.call(create_tables)
        yield test_client
        test_client.portal.call(dispose)

    app.dependency_overrides.clear()


@pytest.fixture
def run(client):
    """Run a coroutine function on the app's event loop."""

    def _run(fn, *args):
        return client.portal.call(fn, *args)

    return _run


@pytest.fixture
def seed_project(run, session_factory):
    """Insert a project directly and return its id as a string."""

    def _seed(status: str = STATUS_ACTIVE, title: str = "Seeded Project", **fields) -> str:
        async def insert() -> uuid.UUID:
            async with session_factory() as session:
                project = Project(
                    title=title,
                    role=fields.get("role", "Backend Engineer"),
                    description=fields.get("description", "A project seeded for tests"),
                    timeline=fields.get("timeline", "2 weeks"),
                    deadline_to_apply=fields.get(
                        "deadline_to_apply", datetime.date.today() + datetime.timedelta(days=7)
                    ),
                    project_details=fields.get("project_details", "Secret repository link"),
                    status=status,
                    created_by=ADMIN.uid,
                    created_by_email=ADMIN.email,
                )
                session.add(project)
                await session.commit()
                return project.id

        return str(run(insert))

    return _seed


@pytest.fixture
def sign_in(client):
    """Provision users by hitting /auth/me with their tokens."""

    def _sign_in(*tokens: str) -> None:
        for token in tokens:
            response = client.get("/api/auth/me", headers=auth(token))
            assert response.status_code == 200, response.text

    return _sign_in
