"""
Notification fan-out and single-recipient status emails.

Rules:
  • Notifications never decide the outcome of the mutation that
    triggered them — callers commit first, then notify.
  • Bulk fan-out is a settle-all join: every recipient is attempted,
    one failure never stops the others, and the result is a tally.
  • A disabled mailer skips sends; skipped is reported as neither
    sent nor failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from projectify.core.config import settings
from projectify.models.application import STATUS_APPROVED, STATUS_REJECTED
from projectify.models.project import Project
from projectify.services.mailer import Mailer, render_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Recipient:
    email: str
    name: str


@dataclass(slots=True)
class NotificationSummary:
    """Counts reported alongside a newly published project."""

    total_users: int
    emails_sent: int = 0
    emails_failed: int = 0
    error: str | None = None


def _project_context(project: Project) -> dict[str, Any]:
    return {
        "title": project.title,
        "role": project.role,
        "description": project.description,
        "timeline": project.timeline,
        "deadline_to_apply": project.deadline_to_apply,
    }


# ── New project fan-out ─────────────────────────────────────
async def send_job_notification(
    mailer: Mailer,
    recipient: Recipient,
    project: Project,
) -> None:
    """Send the "new project available" email to one user. Raises on failure."""
    html = render_email(
        "new_project.html",
        name=recipient.name,
        project=_project_context(project),
        dashboard_url=f"{settings.FRONTEND_URL}/user/dashboard",
    )
    await mailer.send(
        recipient.email,
        f"New Project Available - {project.title}",
        html,
    )


async def notify_new_project(
    mailer: Mailer,
    recipients: Iterable[Recipient],
    project: Project,
) -> NotificationSummary:
    """
    Email every recipient about `project`, concurrently and independently.

    Recipients without an email address are dropped before counting.
    Per-recipient exceptions are collected by gather(return_exceptions=True)
    and counted as failures; nothing here raises because of a failed send.
    """
    targets = [r for r in recipients if r.email]
    summary = NotificationSummary(total_users=len(targets))

    if not targets:
        logger.info("No users to notify about project %s", project.id)
        return summary

    if not mailer.enabled:
        logger.info(
            "Email disabled — skipped %d job notifications for project %s",
            len(targets),
            project.id,
        )
        return summary

    results = await asyncio.gather(
        *(send_job_notification(mailer, r, project) for r in targets),
        return_exceptions=True,
    )

    for recipient, result in zip(targets, results):
        if isinstance(result, BaseException):
            summary.emails_failed += 1
            logger.warning(
                "Job notification to %s failed: %s", recipient.email, result,
            )
        else:
            summary.emails_sent += 1

    logger.info(
        "Job notifications for project %s: %d sent, %d failed",
        project.id,
        summary.emails_sent,
        summary.emails_failed,
    )
    return summary


# ── Application decisions ───────────────────────────────────
_DECISION_TEMPLATES = {
    STATUS_APPROVED: (
        "application_approved.html",
        'Your application for "{title}" has been approved!',
    ),
    STATUS_REJECTED: (
        "application_rejected.html",
        'Update on your application for "{title}"',
    ),
}


async def notify_application_decision(
    mailer: Mailer,
    *,
    email: str,
    name: str,
    project_title: str,
    status: str,
) -> bool:
    """
    Send the approval or rejection email for one application.

    Runs as a background task after the response, so it must not raise:
    failures are logged and reported as False.
    """
    template_name, subject = _DECISION_TEMPLATES[status]
    try:
        html = render_email(
            template_name,
            name=name,
            project_title=project_title,
            dashboard_url=f"{settings.FRONTEND_URL}/user/dashboard",
        )
        await mailer.send(email, subject.format(title=project_title), html)
    except Exception:
        logger.exception("Failed to send %s email to %s", status, email)
        return False
    return True
