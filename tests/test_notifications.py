import asyncio
import datetime

from conftest import RecordingMailer
from projectify.core.config import Settings
from projectify.models.project import Project
from projectify.services.mailer import DisabledMailer, SMTPMailer, build_mailer, render_email
from projectify.services.notifications import (
    Recipient,
    notify_application_decision,
    notify_new_project,
)


def sample_project() -> Project:
    return Project(
        title="Data Pipeline",
        role="Data Engineer",
        description="Move events into the warehouse",
        timeline="6 weeks",
        deadline_to_apply=datetime.date(2030, 1, 31),
    )


def recipients(n: int) -> list[Recipient]:
    return [Recipient(email=f"user{i}@example.com", name=f"User {i}") for i in range(n)]


# ── Fan-out ─────────────────────────────────────────────────
def test_every_recipient_is_attempted_and_failures_counted():
    mailer = RecordingMailer()
    targets = recipients(5)
    mailer.fail_for = {targets[1].email, targets[3].email}

    summary = asyncio.run(notify_new_project(mailer, targets, sample_project()))

    assert summary.total_users == 5
    assert summary.emails_sent == 3
    assert summary.emails_failed == 2
    assert len(mailer.sent) == 3


def test_recipients_without_email_are_not_counted():
    mailer = RecordingMailer()
    targets = recipients(2) + [Recipient(email="", name="No Mail")]

    summary = asyncio.run(notify_new_project(mailer, targets, sample_project()))

    assert summary.total_users == 2
    assert summary.emails_sent == 2


def test_disabled_mailer_skips_without_failures():
    summary = asyncio.run(notify_new_project(DisabledMailer(), recipients(3), sample_project()))

    assert (summary.total_users, summary.emails_sent, summary.emails_failed) == (3, 0, 0)


def test_new_project_email_renders_project_fields():
    mailer = RecordingMailer()

    asyncio.run(notify_new_project(mailer, recipients(1), sample_project()))

    to, subject, html = mailer.sent[0]
    assert subject == "New Project Available - Data Pipeline"
    assert "Hello User 0" in html
    assert "Data Engineer" in html
    assert "2030-01-31" in html


def test_template_escapes_markup():
    html = render_email(
        "application_approved.html",
        name="<script>alert(1)</script>",
        project_title="X",
        dashboard_url="http://localhost",
    )

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


# ── Decision emails ─────────────────────────────────────────
def test_decision_email_reports_success():
    mailer = RecordingMailer()

    sent = asyncio.run(
        notify_application_decision(
            mailer,
            email="a@example.com",
            name="A",
            project_title="Gateway",
            status="approved",
        )
    )

    assert sent is True
    assert mailer.sent[0][1] == 'Your application for "Gateway" has been approved!'


def test_decision_email_failure_is_swallowed():
    mailer = RecordingMailer()
    mailer.fail_for.add("a@example.com")

    sent = asyncio.run(
        notify_application_decision(
            mailer,
            email="a@example.com",
            name="A",
            project_title="Gateway",
            status="rejected",
        )
    )

    assert sent is False


# ── Mailer construction ─────────────────────────────────────
def test_build_mailer_without_credentials_is_disabled():
    config = Settings(DATABASE_URL="sqlite+aiosqlite://", EMAIL_USER="", EMAIL_PASS="")

    assert build_mailer(config).enabled is False


def test_build_mailer_with_credentials_uses_smtp():
    config = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        EMAIL_USER="noreply@example.com",
        EMAIL_PASS="secret",
    )

    mailer = build_mailer(config)

    assert isinstance(mailer, SMTPMailer)
    assert mailer.enabled is True


def test_smtp_message_is_html_with_sender_name():
    mailer = SMTPMailer(
        "smtp.example.com",
        587,
        "noreply@example.com",
        "secret",
        from_name="Projectify",
    )

    message = mailer._build_message("jane@example.com", "Hello", "<p>Hi</p>")

    assert message["From"] == "Projectify <noreply@example.com>"
    assert message["To"] == "jane@example.com"
    assert message.get_body(preferencelist=("html",)).get_content().strip() == "<p>Hi</p>"
