"""
Push notification delivery through Firebase Cloud Messaging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from firebase_admin import messaging

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Sends a single push notification to a device token."""

    def send(self, token: str, title: str, body: str) -> None:
        ...


@dataclass
class SentNotification:
    token: str
    title: str
    body: str


@dataclass
class InMemoryNotifier:
    """Test double that records notifications instead of sending them."""

    sent: list[SentNotification] = field(default_factory=list)
    fail_with: Optional[Exception] = None

    def send(self, token: str, title: str, body: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentNotification(token=token, title=title, body=body))


class FcmNotifier:
    """Firebase Cloud Messaging sender."""

    def send(self, token: str, title: str, body: str) -> None:
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            token=token,
        )
        message_id = messaging.send(message)
        logger.info("Sent notification %s", message_id)


def notify_best_effort(
    notifier: Notifier, token: Optional[str], title: str, body: str
) -> bool:
    """
    Sends a notification if a token is registered. Failures are logged and
    swallowed; returns whether a notification went out.
    """
    if not token:
        return False
    try:
        notifier.send(token, title, body)
    except Exception as e:
        logger.warning(f"Failed to send notification '{title}': {e}")
        return False
    return True
