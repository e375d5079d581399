"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity, build the mailer, the identity
    provider, the change feed and the rate limiter into app.state.
  • On shutdown: dispose the engine cleanly.

Every route runs enforce_rate_limit first (per client address) and every
response carries the baseline security headers.

Routers (all under API_PREFIX, default /api):
  • /auth            — caller's own profile
  • /projects        — project board
  • /admin-projects  — publication with email fan-out (admin)
  • /applications    — apply, review, decide
  • /users           — account administration (admin)
  • /teams           — team records
  • /health          — shallow liveness probe
"""

import logging
import time
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from projectify.auth.identity import build_identity_provider
from projectify.auth.rate_limit import build_rate_limiter, enforce_rate_limit
from projectify.core.config import settings
from projectify.core.database import engine, utcnow
from projectify.core.handlers import register_exception_handlers
from projectify.routers.admin_projects import router as admin_projects_router
from projectify.routers.applications import router as applications_router
from projectify.routers.auth import router as auth_router
from projectify.routers.projects import router as projects_router
from projectify.routers.teams import router as teams_router
from projectify.routers.users import router as users_router
from projectify.schemas.common import HealthEnvelope
from projectify.services.change_feed import ChangeFeed
from projectify.services.mailer import build_mailer

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
}


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup — verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    # Startup — process-wide collaborators
    app.state.mailer = build_mailer(settings)
    app.state.identity_provider = build_identity_provider(settings)
    app.state.change_feed = ChangeFeed()
    app.state.rate_limiter = build_rate_limiter(settings)
    logger.info(
        "Email notifications %s",
        "enabled ✓" if app.state.mailer.enabled else "disabled",
    )
    logger.info(
        "Rate limiting %s (%d requests / %ds per client)",
        "enabled ✓" if settings.RATE_LIMIT_ENABLED else "disabled",
        settings.RATE_LIMIT_REQUESTS,
        settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    yield  # ← application runs here

    # Shutdown — clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── App ─────────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        "Project marketplace API — admins publish projects, "
        "users apply, admins approve or reject, everyone is emailed."
    ),
    lifespan=lifespan,
    dependencies=[Depends(enforce_rate_limit)],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


register_exception_handlers(app)

# Mount routers
api = settings.API_PREFIX
app.include_router(auth_router, prefix=f"{api}/auth")
app.include_router(projects_router, prefix=f"{api}/projects")
app.include_router(admin_projects_router, prefix=f"{api}/admin-projects")
app.include_router(applications_router, prefix=f"{api}/applications")
app.include_router(users_router, prefix=f"{api}/users")
app.include_router(teams_router, prefix=f"{api}/teams")


# ── Health check ────────────────────────────────────────────
@app.get(
    f"{api}/health",
    response_model=HealthEnvelope,
    tags=["System"],
    summary="Liveness probe",
)
async def health_check() -> HealthEnvelope:
    """Shallow health check — confirms the process is alive."""
    return HealthEnvelope(
        message="Server is running and healthy",
        environment=settings.ENVIRONMENT,
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        timestamp=utcnow(),
        port=settings.PORT,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("projectify.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
