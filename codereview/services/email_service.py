"""Templated HTML email over SMTP.

Templates are HTML fragments in ``codereview/templates/email`` keyed by file name and
rendered with ``string.Template`` placeholders; every substituted value is
HTML-escaped. Sending never raises: a failed delivery is logged and reported as
``False``.
"""

import html
import smtplib
from email.message import EmailMessage
from email.utils import formatdate
from importlib.resources import files
from string import Template
from typing import Optional, Protocol

from starlette.concurrency import run_in_threadpool

from codereview.core import get_config, get_logger, utcnow
from codereview.core.settings import MailSettings
from codereview.models import NotificationType, RelatedResource, ResourceKind, User

logger = get_logger("services.email")

SUBJECT_PREFIX = "CodeReview Platform"


class EmailSender(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> bool: ...


class SmtpEmailSender:
    """Delivers messages through an SMTP relay, with optional STARTTLS and login."""

    def __init__(self, settings: MailSettings):
        self.settings = settings

    def send(self, to: str, subject: str, html_body: str) -> bool:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.FROM_ADDRESS
        msg["To"] = to
        msg["Date"] = formatdate(localtime=True)
        msg.set_content("This message requires an HTML capable email client.")
        msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.settings.HOST, self.settings.PORT, timeout=self.settings.TIMEOUT) as server:
                if self.settings.USE_TLS:
                    server.starttls()
                if self.settings.USERNAME and self.settings.PASSWORD:
                    server.login(self.settings.USERNAME, self.settings.PASSWORD.get_secret_value())
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("email_send_failed", to=to, subject=subject, error=str(exc))
            return False
        logger.info("email_sent", to=to, subject=subject)
        return True


class DisabledEmailSender:
    """Used when ``MAIL.ENABLED`` is off: logs the message and reports no delivery."""

    def send(self, to: str, subject: str, html_body: str) -> bool:
        logger.info("email_skipped", to=to, subject=subject)
        return False


def render_template(template_name: str, /, **values: object) -> str:
    """Render ``templates/email/<template_name>.html`` inside the shared layout."""
    folder = files("codereview").joinpath("templates", "email")
    escaped = {key: html.escape(str(value)) for key, value in values.items()}
    body = Template(folder.joinpath(f"{template_name}.html").read_text(encoding="utf-8")).substitute(escaped)
    layout = Template(folder.joinpath("_layout.html").read_text(encoding="utf-8"))
    return layout.substitute(
        title=html.escape(str(values.get("title", SUBJECT_PREFIX))),
        body=body,
        year=utcnow().year,
    )


class EmailService:
    """Builds the platform's emails and hands them to an :class:`EmailSender`."""

    def __init__(self, sender: Optional[EmailSender] = None, frontend_url: Optional[str] = None):
        config = get_config()
        if sender is None:
            sender = SmtpEmailSender(config.MAIL) if config.MAIL.ENABLED else DisabledEmailSender()
        self.sender = sender
        self.frontend_url = (frontend_url or config.APP.FRONTEND_URL).rstrip("/")

    async def send(self, to: str, subject: str, html_body: str) -> bool:
        return await run_in_threadpool(self.sender.send, to, subject, html_body)

    async def send_verification_email(self, user: User, token: str) -> bool:
        link = f"{self.frontend_url}/auth/verify/{token}"
        body = render_template("verification", title="Verify Your Email", name=user.first_name, link=link)
        return await self.send(user.email, f"{SUBJECT_PREFIX} - Verify Your Email", body)

    async def send_password_reset_email(self, user: User, token: str, expires_in: int) -> bool:
        link = f"{self.frontend_url}/auth/reset-password/{token}"
        body = render_template(
            "password_reset",
            title="Reset Your Password",
            name=user.first_name,
            link=link,
            expires_minutes=max(1, expires_in // 60),
        )
        return await self.send(user.email, f"{SUBJECT_PREFIX} - Password Reset", body)

    async def send_notification_email(
        self,
        user: User,
        notification_type: NotificationType,
        content: str,
        related_resource: Optional[RelatedResource] = None,
    ) -> bool:
        notification_type = NotificationType(notification_type)
        body = render_template(
            "notification",
            title=notification_type.subject,
            name=user.first_name,
            content=content,
            link=self.resource_link(related_resource),
            action="View on CodeReview",
        )
        return await self.send(user.email, f"{SUBJECT_PREFIX} - {notification_type.subject}", body)

    def resource_link(self, resource: Optional[RelatedResource]) -> str:
        if resource is None:
            return f"{self.frontend_url}/notifications"
        match resource.kind:
            case ResourceKind.PROJECT:
                return f"{self.frontend_url}/projects/{resource.id}"
            case ResourceKind.COMMENT:
                return f"{self.frontend_url}/comments/{resource.id}"
            case ResourceKind.ASSIGNMENT:
                return f"{self.frontend_url}/assignments/{resource.id}"
        return f"{self.frontend_url}/notifications"
