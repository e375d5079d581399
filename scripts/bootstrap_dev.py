"""
Dev bootstrap script — seed an admin account and one open project.

Usage:
    python -m scripts.bootstrap_dev [admin-uid] [admin-email]

This will:
  1. Create (or reuse) an admin user record keyed by the given uid
  2. Create an `active` sample project attributed to that admin

The uid must match the identity provider's uid for the account you sign
in with, and the email should also be listed in ADMIN_EMAILS so the role
survives later sign-ins. No notifications are sent.
"""

import asyncio
import datetime
import sys

# Ensure the project root is on the path
sys.path.insert(0, ".")

from projectify.core.database import async_session_factory, engine
from projectify.models.project import STATUS_ACTIVE, Project
from projectify.models.user import ROLE_ADMIN, User


async def main(admin_uid: str, admin_email: str) -> None:
    async with async_session_factory() as session:
        # ── Admin user ──────────────────────────────────────
        admin = await session.get(User, admin_uid)
        if admin is None:
            admin = User(id=admin_uid, name="Dev Admin", email=admin_email)
            session.add(admin)
        admin.role = ROLE_ADMIN

        # ── Sample project ──────────────────────────────────
        project = Project(
            title="Sample Marketplace Project",
            role="Backend Engineer",
            description="Seeded project for local development.",
            timeline="4 weeks",
            deadline_to_apply=datetime.date.today() + datetime.timedelta(days=30),
            project_details="Repository access and kickoff notes go here.",
            status=STATUS_ACTIVE,
            created_by=admin_uid,
            created_by_email=admin_email,
        )
        session.add(project)
        await session.commit()

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  Admin:      {admin_email} ({admin_uid})")
    print(f"  Project:    {project.title}")
    print(f"  Project ID: {project.id}")
    print()
    print("  ⚠  Add the admin email to ADMIN_EMAILS before signing in.")
    print("=" * 60)
    print()

    await engine.dispose()


if __name__ == "__main__":
    uid = sys.argv[1] if len(sys.argv) > 1 else "dev-admin"
    email = sys.argv[2] if len(sys.argv) > 2 else "admin@example.com"
    asyncio.run(main(uid, email))
