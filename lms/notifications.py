"""Best-effort notifications to admins.

Notifiers never raise into the caller and never make the caller wait on
delivery. The email notifier sends through aiosmtplib on a background thread.

Configuration (via environment variables):
- SMTP_HOST: SMTP server hostname
- SMTP_PORT: SMTP server port (default: 587)
- SMTP_USERNAME / SMTP_PASSWORD: SMTP credentials
- SMTP_USE_TLS: Use STARTTLS (default: true)
- SMTP_FROM_EMAIL: Sender email address
"""

import asyncio
import logging
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Dict, Optional, Sequence

import aiosmtplib

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipient:
    id: int
    email: Optional[str] = None


@dataclass(frozen=True)
class NotificationMessage:
    subject: str
    body: str


class Notifier(ABC):
    """Base class for notifiers."""

    def notify(self, recipients: Sequence[Recipient], message: NotificationMessage) -> None:
        """Deliver ``message`` to ``recipients``; failures are logged, never raised."""
        try:
            self.deliver(list(recipients), message)
        except Exception as e:
            logger.error(f"Notification '{message.subject}' failed: {e}", exc_info=True)

    @abstractmethod
    def deliver(self, recipients: Sequence[Recipient], message: NotificationMessage) -> None:
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the log; used when SMTP is not configured."""

    def deliver(self, recipients: Sequence[Recipient], message: NotificationMessage) -> None:
        emails = [r.email for r in recipients if r.email]
        logger.info(f"Notify -> {emails} {message.subject} {message.body}")


class EmailNotifier(Notifier):
    """Sends one email addressed to every recipient with an address."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @classmethod
    def from_env(cls) -> Optional["EmailNotifier"]:
        """Build from SMTP_* variables, or None when any required one is unset."""
        smtp_host = os.getenv("SMTP_HOST")
        smtp_username = os.getenv("SMTP_USERNAME")
        smtp_password = os.getenv("SMTP_PASSWORD")
        smtp_from_email = os.getenv("SMTP_FROM_EMAIL")
        if not all([smtp_host, smtp_username, smtp_password, smtp_from_email]):
            return None
        return cls({
            "host": smtp_host,
            "port": int(os.getenv("SMTP_PORT", "587")),
            "username": smtp_username,
            "password": smtp_password,
            "use_tls": os.getenv("SMTP_USE_TLS", "true").lower() == "true",
            "from_email": smtp_from_email,
        })

    def build_message(self, recipients: Sequence[Recipient], message: NotificationMessage) -> EmailMessage:
        email = EmailMessage()
        email["From"] = self.config["from_email"]
        email["To"] = ", ".join(r.email for r in recipients if r.email)
        email["Subject"] = message.subject
        email.set_content(message.body)
        return email

    def deliver(self, recipients: Sequence[Recipient], message: NotificationMessage) -> None:
        if not any(r.email for r in recipients):
            logger.debug(f"No email recipients for '{message.subject}'")
            return
        email = self.build_message(recipients, message)
        thread = threading.Thread(target=self._send, args=(email,), daemon=True)
        thread.start()

    def _send(self, email: EmailMessage) -> None:
        try:
            asyncio.run(aiosmtplib.send(
                email,
                hostname=self.config["host"],
                port=self.config["port"],
                username=self.config["username"],
                password=self.config["password"],
                start_tls=self.config["use_tls"],
            ))
            logger.info(f"Email sent to {email['To']}: {email['Subject']}")
        except Exception as e:
            logger.error(f"Failed to send email to {email['To']}: {e}", exc_info=True)


def default_notifier() -> Notifier:
    """Email when SMTP is configured, otherwise the log."""
    return EmailNotifier.from_env() or LoggingNotifier()
