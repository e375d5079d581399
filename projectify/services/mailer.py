"""
Outbound email — the notification sender.

Two implementations of the Mailer protocol:
  • SMTPMailer     — stdlib smtplib over STARTTLS, run in a worker thread
                     so the event loop never blocks on the socket.
  • DisabledMailer — used when EMAIL_USER / EMAIL_PASS are empty.
                     Sends are skipped, never failed.

build_mailer() picks one at startup; the FastAPI lifespan stores it on
app.state and routers receive it through Depends(get_mailer).

Templates:
  HTML bodies are Jinja2 templates under projectify/templates/email/,
  autoescaped so user-supplied names and titles cannot inject markup.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from pathlib import Path
from typing import Any, Protocol

from fastapi import Request
from jinja2 import Environment, FileSystemLoader, select_autoescape

from projectify.core.config import Settings

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

TEMPLATES = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_email(template_name: str, **context: Any) -> str:
    """Render an email template from templates/email/."""
    return TEMPLATES.get_template(f"email/{template_name}").render(**context)


class Mailer(Protocol):
    """Anything that can deliver one HTML email."""

    enabled: bool

    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one message. Raises on transport failure."""
        ...


class DisabledMailer:
    """No-op sender for environments without SMTP credentials."""

    enabled = False

    async def send(self, to: str, subject: str, html: str) -> None:
        logger.debug("Email disabled, skipping %r to %s", subject, to)


class SMTPMailer:
    """Blocking smtplib delivery, offloaded with asyncio.to_thread."""

    enabled = True

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        *,
        from_name: str = "Projectify",
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from = formataddr((from_name, username))
        self._use_tls = use_tls
        self._timeout = timeout

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._from
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._use_tls:
                server.starttls()
            server.login(self._username, self._password)
            server.send_message(message)

    async def send(self, to: str, subject: str, html: str) -> None:
        message = self._build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError):
            logger.error("Email to %s failed (subject=%r)", to, subject)
            raise
        logger.info("Email sent to %s (subject=%r)", to, subject)


def build_mailer(config: Settings) -> Mailer:
    """Pick the sender for this process from configuration."""
    if not config.EMAIL_USER or not config.EMAIL_PASS:
        logger.warning(
            "Email credentials not configured. Email notifications are disabled."
        )
        return DisabledMailer()

    return SMTPMailer(
        config.SMTP_HOST,
        config.SMTP_PORT,
        config.EMAIL_USER,
        config.EMAIL_PASS,
        from_name=config.EMAIL_FROM_NAME,
        use_tls=config.SMTP_USE_TLS,
        timeout=config.SMTP_TIMEOUT_SECONDS,
    )


def get_mailer(request: Request) -> Mailer:
    """FastAPI dependency — the process-wide mailer built in the lifespan."""
    return request.app.state.mailer
