"""Data access layer (repositories) for persistence operations.

Repositories encapsulate database operations on talents, calendars, offers,
applications, alerts, notifications and digest cursors, and return domain
models rather than ORM models.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from talentmatch.domain.models import (
    UNAVAILABILITY_TYPES,
    Alert,
    AlertFrequency,
    CalendarEntry,
    Notification,
    Offer,
    OfferStatus,
    TalentProfile,
)
from talentmatch.utils.timestamps import format_date, format_timestamp, parse_timestamp

from .exceptions import DataIntegrityError, PersistenceError, RecordNotFoundError
from .schema import (
    AlertModel,
    ApplicationModel,
    CalendarEntryModel,
    DigestCursorModel,
    NotificationModel,
    OfferModel,
    TalentModel,
)

logger = logging.getLogger(__name__)


class TalentRepository:
    """Repository for talent profiles."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, talent_id: int) -> Optional[TalentProfile]:
        """Retrieve a talent profile by id, or None when it does not exist.

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            talent_model = self.session.get(TalentModel, talent_id)
            return talent_model.to_domain() if talent_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve talent: {e}") from e

    def upsert(self, talent: TalentProfile) -> TalentProfile:
        """Insert a new talent profile or replace an existing one.

        Raises:
            DataIntegrityError: On constraint violation
            PersistenceError: If database error occurs
        """
        try:
            talent_model = self.session.merge(TalentModel.from_domain(talent))
            self.session.flush()
            return talent_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to upsert talent {talent.id}: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting talent {talent.id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert talent: {e}") from e


class CalendarRepository:
    """Repository for talent calendar entries."""

    def __init__(self, session: Session):
        self.session = session

    def get_unavailability_from(self, talent_id: int, from_date: date) -> List[CalendarEntry]:
        """Retrieve unavailability entries dated ``from_date`` or later.

        Only in-mission, leave, sick-leave and unavailable days are returned;
        other entry types never affect scoring.

        Returns:
            Calendar entries ordered by date
        """
        try:
            stmt = (
                select(CalendarEntryModel)
                .where(
                    CalendarEntryModel.talent_id == talent_id,
                    CalendarEntryModel.entry_date >= format_date(from_date),
                    CalendarEntryModel.entry_type.in_([t.value for t in UNAVAILABILITY_TYPES]),
                )
                .order_by(CalendarEntryModel.entry_date)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving calendar of talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve calendar: {e}") from e

    def add_entries(self, entries: List[CalendarEntry]) -> int:
        """Insert calendar entries and return how many were added."""
        try:
            self.session.add_all([CalendarEntryModel.from_domain(entry) for entry in entries])
            self.session.flush()
            return len(entries)
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to add calendar entries: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding calendar entries: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add calendar entries: {e}") from e


class OfferRepository:
    """Repository for offers."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, offer_id: int) -> Optional[Offer]:
        """Retrieve an offer by id regardless of its status."""
        try:
            offer_model = self.session.get(OfferModel, offer_id)
            return offer_model.to_domain() if offer_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving offer {offer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve offer: {e}") from e

    def get_published_by_ref(self, ref: Union[int, str]) -> Optional[Offer]:
        """Resolve a published offer by numeric id, uid or slug.

        Args:
            ref: Internal id, public uid, or slug

        Returns:
            Offer if a published offer matches, None otherwise
        """
        conditions = []
        text_ref = str(ref).strip()
        if not text_ref:
            return None
        if text_ref.isdigit():
            conditions.append(OfferModel.id == int(text_ref))
        conditions.append(OfferModel.uid == text_ref)
        conditions.append(OfferModel.slug == text_ref)

        try:
            stmt = (
                select(OfferModel)
                .where(OfferModel.status == OfferStatus.PUBLISHED.value, or_(*conditions))
                .order_by(OfferModel.id)
            )
            offer_model = self.session.execute(stmt).scalars().first()
            return offer_model.to_domain() if offer_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error resolving offer {ref!r}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to resolve offer: {e}") from e

    def list_published(self, limit: Optional[int] = None) -> List[Offer]:
        """Retrieve published offers, most recently published first."""
        try:
            stmt = (
                select(OfferModel)
                .where(OfferModel.status == OfferStatus.PUBLISHED.value)
                .order_by(OfferModel.published_at.desc(), OfferModel.id.desc())
            )
            if limit is not None:
                stmt = stmt.limit(limit)
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing published offers: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list published offers: {e}") from e

    def list_published_between(self, start: datetime, end: datetime) -> List[Offer]:
        """Retrieve offers published in the half-open window ``[start, end)``."""
        try:
            stmt = (
                select(OfferModel)
                .where(
                    OfferModel.status == OfferStatus.PUBLISHED.value,
                    OfferModel.published_at >= format_timestamp(start),
                    OfferModel.published_at < format_timestamp(end),
                )
                .order_by(OfferModel.published_at, OfferModel.id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing offers published in window: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list offers published in window: {e}") from e

    def upsert(self, offer: Offer) -> Offer:
        """Insert a new offer or replace an existing one."""
        try:
            offer_model = self.session.merge(OfferModel.from_domain(offer))
            self.session.flush()
            return offer_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to upsert offer {offer.uid}: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error upserting offer {offer.uid}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to upsert offer: {e}") from e

    def publish(self, offer_id: int, published_at: datetime) -> Offer:
        """Mark an offer as published.

        Raises:
            RecordNotFoundError: If the offer does not exist
        """
        try:
            offer_model = self.session.get(OfferModel, offer_id)
            if offer_model is None:
                raise RecordNotFoundError(f"Offer not found: {offer_id}")
            offer_model.status = OfferStatus.PUBLISHED.value
            offer_model.published_at = format_timestamp(published_at)
            self.session.flush()
            return offer_model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error publishing offer {offer_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to publish offer: {e}") from e


class ApplicationRepository:
    """Repository for candidatures (read-mostly from the matching side)."""

    def __init__(self, session: Session):
        self.session = session

    def applied_offer_ids(self, talent_id: int) -> Set[int]:
        """Return the ids of offers the talent already applied to."""
        try:
            stmt = select(ApplicationModel.offer_id).where(ApplicationModel.talent_id == talent_id)
            return set(self.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving applications of talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve applications: {e}") from e

    def add(self, talent_id: int, offer_id: int, created_at: datetime) -> None:
        """Record a candidature.

        Raises:
            DataIntegrityError: If the talent already applied to the offer
        """
        try:
            self.session.add(
                ApplicationModel(
                    talent_id=talent_id,
                    offer_id=offer_id,
                    created_at=format_timestamp(created_at),
                )
            )
            self.session.flush()
        except IntegrityError as e:
            raise DataIntegrityError(
                f"Failed to record application of talent {talent_id} to offer {offer_id}: {e}"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error recording application: {e}", exc_info=True)
            raise PersistenceError(f"Failed to record application: {e}") from e


class AlertRepository:
    """Repository for alert subscriptions."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, alert: Alert) -> Alert:
        """Insert a new alert and return it with its assigned id."""
        try:
            alert_model = AlertModel.from_domain(alert)
            alert_model.id = None
            self.session.add(alert_model)
            self.session.flush()
            return alert_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to create alert: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating alert: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create alert: {e}") from e

    def get_for_talent(self, talent_id: int, alert_id: int) -> Optional[Alert]:
        """Retrieve an alert only when it belongs to the given talent."""
        try:
            stmt = select(AlertModel).where(
                AlertModel.id == alert_id, AlertModel.talent_id == talent_id
            )
            alert_model = self.session.execute(stmt).scalar_one_or_none()
            return alert_model.to_domain() if alert_model else None
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve alert: {e}") from e

    def list_for_talent(self, talent_id: int) -> List[Alert]:
        """Retrieve a talent's alerts, newest first."""
        try:
            stmt = (
                select(AlertModel)
                .where(AlertModel.talent_id == talent_id)
                .order_by(AlertModel.created_at.desc(), AlertModel.id.desc())
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing alerts of talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list alerts: {e}") from e

    def count_for_talent(self, talent_id: int) -> int:
        try:
            stmt = select(func.count(AlertModel.id)).where(AlertModel.talent_id == talent_id)
            return self.session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting alerts of talent {talent_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count alerts: {e}") from e

    def update(self, alert_id: int, changes: Dict[str, Any]) -> Alert:
        """Apply a partial update to an alert.

        Args:
            alert_id: Alert to update
            changes: Domain field names mapped to their new values

        Raises:
            RecordNotFoundError: If the alert does not exist
        """
        try:
            alert_model = self.session.get(AlertModel, alert_id)
            if alert_model is None:
                raise RecordNotFoundError(f"Alert not found: {alert_id}")

            updated = alert_model.to_domain().model_copy(update=changes)
            # Re-validate the merged record before writing it back
            updated = Alert.model_validate(updated.model_dump())
            replacement = AlertModel.from_domain(updated)
            for column in ("name", "skills", "min_rate", "mobility", "locations", "frequency", "active"):
                setattr(alert_model, column, getattr(replacement, column))

            self.session.flush()
            return alert_model.to_domain()
        except SQLAlchemyError as e:
            logger.error(f"Error updating alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update alert: {e}") from e

    def get_active_by_frequency(
        self, frequency: AlertFrequency
    ) -> List[Tuple[Alert, Optional[int]]]:
        """Retrieve active alerts of a frequency with their recipient id.

        Returns:
            (alert, recipient user id) pairs; the recipient is None when the
            talent has no account to notify
        """
        try:
            stmt = (
                select(AlertModel, TalentModel.user_id)
                .join(TalentModel, TalentModel.id == AlertModel.talent_id)
                .where(AlertModel.frequency == frequency.value, AlertModel.active.is_(True))
                .order_by(AlertModel.id)
            )
            return [(model.to_domain(), user_id) for model, user_id in self.session.execute(stmt)]
        except SQLAlchemyError as e:
            logger.error(f"Error listing active {frequency.value} alerts: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list active alerts: {e}") from e

    def record_notification(self, alert_id: int, offer_count: int, notified_at: datetime) -> None:
        """Increment the sent counter and stamp the last notification time."""
        try:
            stmt = (
                update(AlertModel)
                .where(AlertModel.id == alert_id)
                .values(
                    notifications_sent=AlertModel.notifications_sent + offer_count,
                    last_notified_at=format_timestamp(notified_at),
                )
            )
            self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Error recording notification for alert {alert_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to record alert notification: {e}") from e


class NotificationRepository:
    """Repository for stored notifications."""

    def __init__(self, session: Session):
        self.session = session

    def exists_for_link(self, recipient_id: int, notification_type: str, link: str) -> bool:
        """Check whether the recipient already has a notification of this type for a link."""
        try:
            stmt = (
                select(NotificationModel.id)
                .where(
                    NotificationModel.recipient_id == recipient_id,
                    NotificationModel.type == notification_type,
                    NotificationModel.link == link,
                )
                .limit(1)
            )
            return self.session.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking notifications of {recipient_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to check notifications: {e}") from e

    def create(
        self,
        recipient_id: int,
        notification_type: str,
        title: str,
        message: str,
        link: Optional[str],
        dedup_key: Optional[str],
        created_at: datetime,
    ) -> Notification:
        """Insert a notification inside a savepoint.

        A dedup key collision only rolls back the savepoint; the surrounding
        transaction stays usable.

        Raises:
            DataIntegrityError: If ``dedup_key`` is already taken
            PersistenceError: If database error occurs
        """
        notification_model = NotificationModel(
            recipient_id=recipient_id,
            type=notification_type,
            title=title,
            message=message,
            link=link,
            dedup_key=dedup_key,
            created_at=format_timestamp(created_at),
        )
        try:
            with self.session.begin_nested():
                self.session.add(notification_model)
            return notification_model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Notification already exists for key {dedup_key}") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating notification for {recipient_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to create notification: {e}") from e

    def list_for_recipient(self, recipient_id: int) -> List[Notification]:
        """Retrieve a recipient's notifications, oldest first."""
        try:
            stmt = (
                select(NotificationModel)
                .where(NotificationModel.recipient_id == recipient_id)
                .order_by(NotificationModel.id)
            )
            return [model.to_domain() for model in self.session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Error listing notifications of {recipient_id}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to list notifications: {e}") from e


class DigestCursorRepository:
    """Repository for the end of the last processed digest window."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, frequency: AlertFrequency) -> Optional[datetime]:
        try:
            cursor = self.session.get(DigestCursorModel, frequency.value)
            return parse_timestamp(cursor.window_end) if cursor else None
        except SQLAlchemyError as e:
            logger.error(f"Error reading {frequency.value} digest cursor: {e}", exc_info=True)
            raise PersistenceError(f"Failed to read digest cursor: {e}") from e

    def set(self, frequency: AlertFrequency, window_end: datetime) -> None:
        try:
            self.session.merge(
                DigestCursorModel(frequency=frequency.value, window_end=format_timestamp(window_end))
            )
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error writing {frequency.value} digest cursor: {e}", exc_info=True)
            raise PersistenceError(f"Failed to write digest cursor: {e}") from e
