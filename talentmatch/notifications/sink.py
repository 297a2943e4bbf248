"""Notification sinks.

A sink stores (and eventually delivers) notifications. The alert dispatcher
only depends on the ``NotificationSink`` protocol; the database-backed
implementation below is what the service runs with.
"""

from typing import Protocol

from sqlalchemy.orm import Session

from talentmatch.domain.models import Notification
from talentmatch.logging import get_logger
from talentmatch.persistence import DataIntegrityError, NotificationRepository, PersistenceError
from talentmatch.utils.timestamps import utc_now

from .models import DuplicateNotificationError, NotificationRequest, NotificationSinkError

logger = get_logger(__name__, component="notifications")


class NotificationSink(Protocol):
    """Collaborator that stores notifications for recipients."""

    def has_notification(self, recipient_id: int, notification_type: str, link: str) -> bool:
        """Check whether the recipient already has a notification for ``link``."""
        ...

    def create(self, request: NotificationRequest) -> Notification:
        """Create a notification.

        Raises:
            DuplicateNotificationError: If ``request.dedup_key`` is already used
            NotificationSinkError: If the notification cannot be stored
        """
        ...


class DatabaseNotificationSink:
    """Stores notifications in the notifications table of the current session."""

    def __init__(self, session: Session):
        self.repository = NotificationRepository(session)

    def has_notification(self, recipient_id: int, notification_type: str, link: str) -> bool:
        try:
            return self.repository.exists_for_link(recipient_id, notification_type, link)
        except PersistenceError as e:
            raise NotificationSinkError(f"Failed to look up notifications: {e}") from e

    def create(self, request: NotificationRequest) -> Notification:
        try:
            notification = self.repository.create(
                recipient_id=request.recipient_id,
                notification_type=request.type,
                title=request.title,
                message=request.message,
                link=request.link,
                dedup_key=request.dedup_key,
                created_at=utc_now(),
            )
        except DataIntegrityError as e:
            raise DuplicateNotificationError(str(e)) from e
        except PersistenceError as e:
            raise NotificationSinkError(f"Failed to store notification: {e}") from e

        logger.debug(
            "Notification stored",
            extra={
                "event": "notifications.stored",
                "recipient_id": request.recipient_id,
                "notification_type": request.type,
                "link": request.link,
            },
        )
        return notification
