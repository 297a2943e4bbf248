"""Data models and exceptions for the notification sink.

This module defines the request type handed to a sink and the exceptions
raised along the notification path.
"""

from dataclasses import dataclass
from typing import Optional

NEW_OFFER_MATCH = "NEW_OFFER_MATCH"


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when template rendering fails due to configuration or missing variables."""

    pass


class NotificationSinkError(NotificationError):
    """Raised when the sink fails to store or deliver a notification."""

    pass


class DuplicateNotificationError(NotificationSinkError):
    """Raised when a notification with the same dedup key already exists."""

    pass


@dataclass
class NotificationRequest:
    """Notification to be created by a sink.

    Attributes:
        recipient_id: User account receiving the notification
        type: Notification type (e.g. NEW_OFFER_MATCH)
        title: Short title
        message: Body text
        link: Target link inside the application
        dedup_key: Idempotency key; None for notifications that may repeat
    """

    recipient_id: int
    type: str
    title: str
    message: str
    link: Optional[str] = None
    dedup_key: Optional[str] = None
