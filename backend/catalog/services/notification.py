"""
Catalog API — Notification Sink
===============================

What:  Sends the "new category created" email to the catalog administrator.
Why:   Category creation must announce itself, but a mail outage must never
       turn a committed creation into an error response.
How:   NotificationSink is the injectable interface. HttpEmailNotifier posts a
       JSON message to an HTTP mail provider with httpx. notify_category_created()
       is scheduled as a FastAPI background task after the creating request
       commits; it logs delivery failures instead of raising.

Payload shape (SendGrid v3 style, accepted by most HTTP mail providers):
    {
        "from": {"email": "no-reply@example.com"},
        "personalizations": [{"to": [{"email": "admin@example.com"}], "subject": "..."}],
        "content": [{"type": "text/plain", ...}, {"type": "text/html", ...}]
    }
"""

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from catalog.config import settings
from catalog.exceptions import NotificationError

logger = logging.getLogger(__name__)

CATEGORY_CREATED_SUBJECT = "New category created"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    text: str
    html: str


def category_created_message(category_name: str, recipient: Optional[str] = None) -> EmailMessage:
    text = f"A new category was created in the catalog: {category_name}"
    return EmailMessage(
        to=recipient or settings.email_admin_recipient,
        subject=CATEGORY_CREATED_SUBJECT,
        text=text,
        html=f"<p>A new category was created in the catalog: {html.escape(category_name)}</p>",
    )


class NotificationSink(ABC):
    """Capability: deliver one email. Raises NotificationError on failure."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        ...

    @property
    def configured(self) -> bool:
        return True


class HttpEmailNotifier(NotificationSink):
    """Delivers email through an HTTP mail provider API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url if api_url is not None else settings.email_api_url
        self.api_key = api_key if api_key is not None else settings.email_api_key
        self.sender = sender or settings.email_from
        self.timeout = timeout or settings.email_timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def build_payload(self, message: EmailMessage) -> dict:
        return {
            "from": {"email": self.sender},
            "personalizations": [{"to": [{"email": message.to}], "subject": message.subject}],
            "content": [
                {"type": "text/plain", "value": message.text},
                {"type": "text/html", "value": message.html},
            ],
        }

    async def send(self, message: EmailMessage) -> None:
        if not self.configured:
            raise NotificationError(
                message="Email provider not configured",
                context={"to": message.to},
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.api_url, json=self.build_payload(message), headers=headers)
        except httpx.HTTPError as e:
            raise NotificationError(
                message=f"Email provider unreachable: {e}",
                context={"to": message.to, "error_type": type(e).__name__},
            ) from e

        if not 200 <= resp.status_code < 300:
            raise NotificationError(
                message=f"Email send failed {resp.status_code}: {resp.text[:200]}",
                context={"to": message.to, "status": resp.status_code},
            )

        logger.info("Notification '%s' sent to %s", message.subject, message.to)


async def notify_category_created(sink: NotificationSink, category_name: str) -> bool:
    """
    Announce a new category. Runs after the creating request has committed.

    Returns True when the provider accepted the message. Delivery failures
    are logged and reported as False; they never propagate.
    """
    message = category_created_message(category_name)
    try:
        await sink.send(message)
    except NotificationError as e:
        logger.warning(
            "Category '%s' was created but the notification failed: %s | Context: %s",
            category_name,
            e.message,
            e.context,
        )
        return False
    return True


notifier = HttpEmailNotifier()


def get_notification_sink() -> NotificationSink:
    """FastAPI dependency; overridden in tests with a recording fake."""
    return notifier
