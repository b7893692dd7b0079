import logging
from typing import Optional

from fastapi import Request
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from utils.sanitize import sanitize_html, sanitize_subject, sanitize_text

logger = logging.getLogger(__name__)


class Mailer:
    """Transactional mail for the contact form and the newsletter."""

    def __init__(
        self,
        config: ConnectionConfig,
        frontend_url: str = "",
        contact_email: Optional[str] = None,
        admin_email: Optional[str] = None,
    ):
        self.fast_mail = FastMail(config)
        self.frontend_url = frontend_url.rstrip("/")
        self.contact_email = contact_email
        self.admin_email = admin_email

    async def _send(self, recipients: list[str], subject: str, html: str):
        message = MessageSchema(
            subject=subject,
            recipients=recipients,
            body=html,
            subtype=MessageType.html,
        )
        await self.fast_mail.send_message(message)

    async def send_contact_email(self, name: str, email: str, subject: str, message: str):
        if not self.contact_email:
            logger.warning("CONTACT_EMAIL is not set, contact notification skipped")
            return

        html_content = f"""
        <h2>New Contact Form Submission</h2>
        <p><strong>Name:</strong> {sanitize_text(name)}</p>
        <p><strong>Email:</strong> {sanitize_text(email)}</p>
        <p><strong>Subject:</strong> {sanitize_text(subject)}</p>
        <p><strong>Message:</strong></p>
        <p>{sanitize_html(message)}</p>
        """

        await self._send(
            [self.contact_email],
            f"New Contact Form Submission: {sanitize_subject(subject)}",
            html_content,
        )

    async def send_welcome_email(
        self, email: str, name: str, unsubscribe_token: str, preferences_token: str
    ):
        unsubscribe_link = f"{self.frontend_url}/unsubscribe?token={unsubscribe_token}"
        preferences_link = (
            f"{self.frontend_url}/newsletter/preferences?token={preferences_token}"
        )
        greeting = f"Hi {sanitize_text(name)}," if name else "Hi there,"

        html_content = f"""
        <html>
            <body>
                <h2>Welcome to the newsletter!</h2>
                <p>{greeting}</p>
                <p>Thanks for subscribing. You will hear from us weekly.</p>
                <p><a href="{preferences_link}">Manage your preferences</a></p>
                <p><a href="{unsubscribe_link}">Unsubscribe</a></p>
            </body>
        </html>
        """

        await self._send([email], "Welcome to the newsletter", html_content)

    async def send_admin_notification(self, email: str, name: str):
        if not self.admin_email:
            return

        html_content = f"""
        <h2>New newsletter subscriber</h2>
        <p><strong>Email:</strong> {sanitize_text(email)}</p>
        <p><strong>Name:</strong> {sanitize_text(name) or "-"}</p>
        """

        await self._send([self.admin_email], "New newsletter subscriber", html_content)


def get_mailer(request: Request) -> Optional[Mailer]:
    return request.app.state.mailer
