"""Outbound email for the password reset flow."""

import logging

import httpx

from ..core.config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when a message could not be handed to the mail provider."""


class Mailer:
    def send(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class LogMailer(Mailer):
    """Development mailer: writes the message to the log instead of sending it."""

    def send(self, to: str, subject: str, html: str) -> None:
        logger.info("Mail to %s: %s\n%s", to, subject, html)


class SendGridMailer(Mailer):
    """Sends mail through the SendGrid v3 REST API."""

    BASE_URL = "https://api.sendgrid.com/v3/mail/send"

    def __init__(self, api_key: str, sender: str, sender_name: str = None, timeout: float = 10.0,
                 transport: httpx.BaseTransport = None):
        self.api_key = api_key
        self.sender = sender
        self.sender_name = sender_name
        self.timeout = timeout
        self.transport = transport

    def _payload(self, to: str, subject: str, html: str) -> dict:
        sender = {"email": self.sender}
        if self.sender_name:
            sender["name"] = self.sender_name
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": sender,
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }

    def send(self, to: str, subject: str, html: str) -> None:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.BASE_URL, json=self._payload(to, subject, html), headers=headers)
        except httpx.HTTPError as exc:
            raise MailDeliveryError(f"Mail provider unreachable: {exc}") from exc

        if response.status_code >= 300:
            raise MailDeliveryError(
                f"Mail provider rejected message ({response.status_code}): {response.text}"
            )
        logger.info("Mail '%s' accepted for %s", subject, to)


def build_mailer(settings: Settings) -> Mailer:
    provider = settings.MAIL_PROVIDER.lower()
    if provider == "sendgrid":
        if not settings.SENDGRID_API_KEY:
            raise ValueError("SENDGRID_API_KEY is required when MAIL_PROVIDER=sendgrid")
        return SendGridMailer(
            api_key=settings.SENDGRID_API_KEY,
            sender=settings.MAIL_FROM,
            sender_name=settings.MAIL_FROM_NAME,
            timeout=settings.MAIL_TIMEOUT_SECONDS,
        )
    if provider == "log":
        return LogMailer()
    raise ValueError(f"Unknown MAIL_PROVIDER: {settings.MAIL_PROVIDER}")


def reset_password_email(reset_link: str, expire_minutes: int) -> str:
    return f"""
    <div style="font-family: sans-serif; text-align: center; padding: 20px;">
      <h2>Password reset request</h2>
      <p>Click the button below to choose a new password (the link expires in {expire_minutes} minutes).</p>
      <a href="{reset_link}" style="display:inline-block;padding:10px 20px;background:#2563eb;color:white;text-decoration:none;border-radius:8px;font-weight:bold;">
        Reset password
      </a>
      <p style="color:#6b7280;font-size:12px;">If you did not ask for this, you can ignore this email.</p>
    </div>
    """
