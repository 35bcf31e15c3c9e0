"""
Notification delivery.

Handlers receive a ``Notifier`` explicitly and get a ``NotificationResult``
back; building the user-facing response is always the caller's job.

Backends:
    RecordingNotifier: keeps an in-memory outbox (tests, local development)
    ResendNotifier: delivers through the Resend email API
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import resend

from venue_booking.config import settings
from venue_booking.mail.templates import EmailMessage

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised by a backend when a message could not be handed off."""


@dataclass(frozen=True)
class NotificationResult:
    """Outcome of a single delivery attempt."""

    success: bool
    recipient: str
    message_id: Optional[str] = None
    error: Optional[str] = None


class Notifier(Protocol):
    async def send(self, message: EmailMessage) -> NotificationResult:
        ...


class RecordingNotifier:
    """Stores every message instead of sending it.

    Set ``fail_for`` to a set of recipients to simulate delivery failures.
    """

    def __init__(self, fail_for: Optional[set[str]] = None) -> None:
        self.outbox: list[EmailMessage] = []
        self.fail_for = fail_for or set()

    async def send(self, message: EmailMessage) -> NotificationResult:
        if message.to in self.fail_for:
            logger.error("Error sending email to %s: simulated failure", message.to)
            return NotificationResult(
                success=False, recipient=message.to, error="simulated failure"
            )
        self.outbox.append(message)
        logger.info("Email recorded for %s: %s", message.to, message.subject)
        return NotificationResult(
            success=True, recipient=message.to, message_id=f"local-{len(self.outbox)}"
        )

    def sent_to(self, recipient: str) -> list[EmailMessage]:
        return [m for m in self.outbox if m.to == recipient]


class ResendNotifier:
    """Sends email through Resend. The blocking client call runs in a worker thread."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        key = api_key if api_key is not None else settings.mail.resend_api_key
        if not key:
            raise NotificationError("Resend API key not configured")
        resend.api_key = key

    def _deliver(self, message: EmailMessage) -> str:
        params: dict = {
            "from": message.from_email,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.cc:
            params["cc"] = [message.cc]
        try:
            response = resend.Emails.send(params)
        except Exception as exc:
            raise NotificationError(f"Email sending failed: {exc}") from exc
        return str(response.get("id", "")) if isinstance(response, dict) else ""

    async def send(self, message: EmailMessage) -> NotificationResult:
        try:
            message_id = await asyncio.to_thread(self._deliver, message)
        except NotificationError as exc:
            logger.error("Error sending email to %s: %s", message.to, exc)
            return NotificationResult(success=False, recipient=message.to, error=str(exc))
        logger.info("Email successfully sent to %s", message.to)
        return NotificationResult(success=True, recipient=message.to, message_id=message_id)
