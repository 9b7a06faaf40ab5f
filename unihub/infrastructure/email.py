"""Best-effort email delivery for notifications via SMTP or SendGrid."""

from __future__ import annotations

import json
import logging
from email.message import EmailMessage
from functools import lru_cache
from typing import Any, Protocol

import aiosmtplib
import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from unihub.config import Settings, get_settings
from unihub.domain.entities import Notification
from unihub.domain.exceptions import MailError
from unihub.infrastructure.email_templates import render_notification_email
from unihub.infrastructure.notifications.scheduling import schedule

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 20


class MailTransport(Protocol):
    name: str

    async def send(self, *, to: str, subject: str, html: str, text: str) -> None: ...


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_failure(status_code: Any, body: Any) -> str:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid API request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid API request failed with status {status_code}"
    if details:
        return f"SendGrid API request failed: {details}"
    return "SendGrid API request failed"


class SmtpTransport:
    """Send messages through an SMTP relay with ``aiosmtplib``."""

    name = "smtp"

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._use_tls = port == 465 if use_tls is None else use_tls

    def build_message(self, *, to: str, subject: str, html: str, text: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        message.add_alternative(html, subtype="html")
        return message

    async def send(self, *, to: str, subject: str, html: str, text: str) -> None:
        message = self.build_message(to=to, subject=subject, html=html, text=text)
        credentials: dict[str, str] = {}
        if self._username and self._password:
            credentials = {"username": self._username, "password": self._password}
        try:
            await aiosmtplib.send(
                message,
                hostname=self._host,
                port=self._port,
                use_tls=self._use_tls,
                timeout=SMTP_TIMEOUT_SECONDS,
                **credentials,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise MailError(f"SMTP delivery to {to} via {self._host} failed: {exc}") from exc


class SendGridTransport:
    """Send messages through the SendGrid REST API."""

    name = "sendgrid"

    def __init__(self, *, api_key: str, sender: str) -> None:
        self._api_key = api_key
        self._sender = sender

    def _send_sync(self, *, to: str, subject: str, html: str, text: str) -> None:
        message = Mail(
            from_email=self._sender,
            to_emails=to,
            subject=subject,
            html_content=html,
            plain_text_content=text,
        )
        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(message)
        except Exception as exc:
            raise MailError(
                _describe_sendgrid_failure(
                    getattr(exc, "status_code", None), getattr(exc, "body", None)
                )
            ) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise MailError(
                _describe_sendgrid_failure(status_code, getattr(response, "body", None))
            )

    async def send(self, *, to: str, subject: str, html: str, text: str) -> None:
        await anyio.to_thread.run_sync(
            lambda: self._send_sync(to=to, subject=subject, html=html, text=text)
        )


def build_mail_transport(settings: Settings) -> MailTransport | None:
    """Return the transport enabled by ``settings`` or ``None``."""

    if settings.smtp_configured:
        return SmtpTransport(
            host=settings.smtp_host or "",
            port=settings.smtp_port,
            sender=settings.smtp_sender or "",
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    if settings.sendgrid_configured:
        return SendGridTransport(
            api_key=settings.sendgrid_api_key or "",
            sender=settings.sendgrid_sender or "",
        )
    return None


@lru_cache(maxsize=1)
def get_mail_transport() -> MailTransport | None:
    """Resolve the mail transport once per process and log the outcome."""

    transport = build_mail_transport(get_settings())
    if transport is None:
        logger.warning("Mailer: SMTP is not fully configured. Emails will not be sent.")
    else:
        logger.info("Mailer: using %s transport", transport.name)
    return transport


def reset_mail_transport_cache() -> None:
    get_mail_transport.cache_clear()


async def send_best_effort(to: str, subject: str, html: str, text: str | None = None) -> bool:
    """Attempt a single delivery and report whether it succeeded.

    Every failure is logged and swallowed; callers never see an exception.
    """

    transport = get_mail_transport()
    if transport is None:
        return False
    if not to or "@" not in to:
        logger.error("Skipping email with invalid recipient %r", to)
        return False

    try:
        await transport.send(to=to, subject=subject, html=html, text=text or subject)
    except MailError as exc:
        logger.error("Failed to send email to %s: %s", to, exc)
        return False
    except Exception as exc:
        logger.exception("Unexpected error sending email to %s: %s", to, exc)
        return False
    logger.info("Email '%s' sent to %s", subject, to)
    return True


def dispatch_notification_email(
    notification: Notification, *, project_name: str | None = None
) -> None:
    """Schedule one best-effort email for a notification with a recipient."""

    recipient = notification.recipient_email
    if not recipient:
        return
    try:
        rendered = render_notification_email(
            notification,
            project_name=project_name,
            base_url=get_settings().frontend_url,
        )
        schedule(send_best_effort, recipient, rendered.subject, rendered.html, rendered.text)
    except Exception:
        logger.exception(
            "Failed to schedule email for notification %s", notification.id
        )


def send_email_to_many(
    recipients: list[str], subject: str, html: str, text: str | None = None
) -> None:
    """Schedule one best-effort email per distinct recipient."""

    seen: set[str] = set()
    for recipient in recipients:
        address = (recipient or "").strip()
        if not address or address in seen:
            continue
        seen.add(address)
        try:
            schedule(send_best_effort, address, subject, html, text)
        except Exception:
            logger.exception("Failed to schedule email to %s", address)


__all__ = [
    "MailTransport",
    "SendGridTransport",
    "SmtpTransport",
    "build_mail_transport",
    "dispatch_notification_email",
    "get_mail_transport",
    "reset_mail_transport_cache",
    "send_best_effort",
    "send_email_to_many",
]
