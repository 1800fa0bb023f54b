"""Outbound email over SMTP.

Learn: Email is a side effect, never part of a transaction. Services call
Mailer.dispatch(), which schedules the send as a background task and
returns immediately. A failed send is logged and forgotten: it must
never block a response or undo a write that already committed.

smtplib is blocking, so the actual send runs in a worker thread.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from html import escape

import structlog
from fastapi import Request

from hireboard.config import Settings, settings as default_settings

logger = structlog.get_logger()


class Mailer:
    """SMTP sender. Disabled (every send returns False) without a host."""

    def __init__(self, config: Settings | None = None):
        self.config = config or default_settings
        self._pending: set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self.config.smtp_host)

    async def send(self, to: str, subject: str, html: str) -> bool:
        """Send one message. Returns True on success, False otherwise."""
        if not self.enabled:
            logger.info("email.disabled", to=to, subject=subject)
            return False
        try:
            await asyncio.to_thread(self._send_sync, to, subject, html)
        except Exception as e:
            logger.warning("email.failed", to=to, subject=subject, error=str(e))
            return False
        logger.info("email.sent", to=to, subject=subject)
        return True

    def dispatch(self, to: str, subject: str, html: str) -> None:
        """Fire-and-forget send on the running event loop."""
        task = asyncio.get_running_loop().create_task(self.send(to, subject, html))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait for dispatched sends still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _send_sync(self, to: str, subject: str, html: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.config.email_from
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")

        if self.config.smtp_port == 465:
            server = smtplib.SMTP_SSL(self.config.smtp_host, self.config.smtp_port, timeout=10)
        else:
            server = smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=10)
        with server:
            if self.config.smtp_port != 465:
                server.starttls()
            if self.config.smtp_user:
                server.login(self.config.smtp_user, self.config.smtp_password)
            server.send_message(msg)


def get_mailer(request: Request) -> Mailer:
    """FastAPI dependency returning the app's Mailer (built in create_app)."""
    return request.app.state.mailer


# ─── Templates ───────────────────────────────────────────


def _wrap(body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"{body}"
        "<p>Best regards,<br>Hireboard Team</p>"
        "</div>"
    )


def welcome_email(name: str) -> tuple[str, str]:
    """(subject, html) for a freshly registered user."""
    html = _wrap(
        "<h2>Welcome to Hireboard!</h2>"
        f"<p>Hi {escape(name)},</p>"
        "<p>Thank you for registering with us. Start exploring opportunities "
        "or post your jobs today.</p>"
    )
    return "Welcome to Hireboard", html


def new_application_email(job_title: str, applicant_name: str) -> tuple[str, str]:
    """(subject, html) telling an employer someone applied."""
    html = _wrap(
        "<h2>New Application</h2>"
        f"<p>You have a new application for the position: <strong>{escape(job_title)}</strong></p>"
        f"<p>Applicant: <strong>{escape(applicant_name)}</strong></p>"
        "<p>Log in to your dashboard to review the application.</p>"
    )
    return f"New Application for {job_title}", html


def status_update_email(job_title: str, status: str) -> tuple[str, str]:
    """(subject, html) telling an applicant their status changed."""
    html = _wrap(
        "<h2>Application Status Update</h2>"
        "<p>Your application status has been updated!</p>"
        f"<p>Job: <strong>{escape(job_title)}</strong></p>"
        f"<p>New Status: <strong>{escape(status)}</strong></p>"
        "<p>Log in to your dashboard for more details.</p>"
    )
    return f"Application Status: {status}", html


def password_reset_email(reset_url: str, expire_minutes: int = 60) -> tuple[str, str]:
    """(subject, html) carrying a one-time password reset link."""
    html = _wrap(
        "<h2>Password Reset Request</h2>"
        "<p>You requested a password reset. Click the link below to reset your password:</p>"
        f'<p><a href="{escape(reset_url)}">Reset Password</a></p>'
        f"<p>This link expires in {expire_minutes} minutes.</p>"
        "<p>If you didn't request this, please ignore this email.</p>"
    )
    return "Password Reset Request", html
