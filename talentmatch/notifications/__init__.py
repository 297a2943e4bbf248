"""Notification sink and rendering for alert notifications.

- NotificationSink: protocol the alert dispatcher writes to
- DatabaseNotificationSink: sink storing notifications with a unique dedup key
- TemplateRenderer: Jinja2 rendering of notification titles and messages
"""

from .models import (
    NEW_OFFER_MATCH,
    DuplicateNotificationError,
    NotificationError,
    NotificationRequest,
    NotificationSinkError,
    NotificationTemplateError,
)
from .sink import DatabaseNotificationSink, NotificationSink
from .templates import TemplateRenderer

__all__ = [
    "NotificationSink",
    "DatabaseNotificationSink",
    "NotificationRequest",
    "NEW_OFFER_MATCH",
    "TemplateRenderer",
    "NotificationError",
    "NotificationSinkError",
    "DuplicateNotificationError",
    "NotificationTemplateError",
]
