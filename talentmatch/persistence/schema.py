"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the database schema and provides
conversion methods between ORM models and domain models. Timestamps are stored
as fixed-width ISO 8601 UTC strings and calendar dates as ``YYYY-MM-DD``, so
string comparison matches chronological order.
"""

import logging

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    inspect,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from talentmatch.domain.models import (
    Alert,
    CalendarEntry,
    Notification,
    Offer,
    TalentProfile,
)
from talentmatch.utils.timestamps import (
    format_date,
    format_timestamp,
    parse_date,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

Base = declarative_base()


class TalentModel(Base):
    """ORM model for talents table."""

    __tablename__ = "talents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    years_experience = Column(Integer, nullable=True)
    daily_rate = Column(Integer, nullable=True)
    availability = Column(String(32), nullable=False)
    mobility = Column(String(32), nullable=False)
    location = Column(String(255), nullable=True)

    def to_domain(self) -> TalentProfile:
        return TalentProfile(
            id=self.id,
            user_id=self.user_id,
            skills=list(self.skills or []),
            years_experience=self.years_experience,
            daily_rate=self.daily_rate,
            availability=self.availability,
            mobility=self.mobility,
            location=self.location,
        )

    @classmethod
    def from_domain(cls, talent: TalentProfile) -> "TalentModel":
        return cls(
            id=talent.id,
            user_id=talent.user_id,
            skills=list(talent.skills),
            years_experience=talent.years_experience,
            daily_rate=talent.daily_rate,
            availability=talent.availability.value,
            mobility=talent.mobility.value,
            location=talent.location,
        )


class CalendarEntryModel(Base):
    """ORM model for calendar_entries table (one row per talent day)."""

    __tablename__ = "calendar_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    talent_id = Column(Integer, ForeignKey("talents.id"), nullable=False)
    entry_date = Column(String(10), nullable=False)
    entry_type = Column(String(32), nullable=False)

    __table_args__ = (Index("idx_calendar_talent_date", "talent_id", "entry_date"),)

    def to_domain(self) -> CalendarEntry:
        return CalendarEntry(
            talent_id=self.talent_id,
            entry_date=parse_date(self.entry_date),
            entry_type=self.entry_type,
        )

    @classmethod
    def from_domain(cls, entry: CalendarEntry) -> "CalendarEntryModel":
        return cls(
            talent_id=entry.talent_id,
            entry_date=format_date(entry.entry_date),
            entry_type=entry.entry_type.value,
        )


class OfferModel(Base):
    """ORM model for offers table."""

    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uid = Column(String(64), nullable=False, unique=True)
    slug = Column(String(255), nullable=True, unique=True)
    title = Column(Text, nullable=False)
    company_name = Column(String(255), nullable=True)
    required_skills = Column(JSON, nullable=False, default=list)
    desired_skills = Column(JSON, nullable=False, default=list)
    min_experience = Column(Integer, nullable=True)
    rate_min = Column(Integer, nullable=True)
    rate_max = Column(Integer, nullable=True)
    mobility = Column(String(32), nullable=False)
    location = Column(String(255), nullable=True)
    start_date = Column(String(10), nullable=True)
    end_date = Column(String(10), nullable=True)
    status = Column(String(16), nullable=False)
    published_at = Column(String(50), nullable=True)

    __table_args__ = (Index("idx_offers_status_published", "status", "published_at"),)

    def to_domain(self) -> Offer:
        return Offer(
            id=self.id,
            uid=self.uid,
            slug=self.slug,
            title=self.title,
            company_name=self.company_name,
            required_skills=list(self.required_skills or []),
            desired_skills=list(self.desired_skills or []),
            min_experience=self.min_experience,
            rate_min=self.rate_min,
            rate_max=self.rate_max,
            mobility=self.mobility,
            location=self.location,
            start_date=parse_date(self.start_date),
            end_date=parse_date(self.end_date),
            status=self.status,
            published_at=parse_timestamp(self.published_at),
        )

    @classmethod
    def from_domain(cls, offer: Offer) -> "OfferModel":
        return cls(
            id=offer.id,
            uid=offer.uid,
            slug=offer.slug,
            title=offer.title,
            company_name=offer.company_name,
            required_skills=list(offer.required_skills),
            desired_skills=list(offer.desired_skills),
            min_experience=offer.min_experience,
            rate_min=offer.rate_min,
            rate_max=offer.rate_max,
            mobility=offer.mobility.value,
            location=offer.location,
            start_date=format_date(offer.start_date),
            end_date=format_date(offer.end_date),
            status=offer.status.value,
            published_at=format_timestamp(offer.published_at),
        )


class ApplicationModel(Base):
    """ORM model for applications table (a talent's candidature to an offer)."""

    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    talent_id = Column(Integer, ForeignKey("talents.id"), nullable=False)
    offer_id = Column(Integer, ForeignKey("offers.id"), nullable=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("talent_id", "offer_id", name="uq_application_talent_offer"),)


class AlertModel(Base):
    """ORM model for alerts table."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    talent_id = Column(Integer, ForeignKey("talents.id"), nullable=False)
    name = Column(String(255), nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    min_rate = Column(Integer, nullable=True)
    mobility = Column(String(32), nullable=True)
    locations = Column(JSON, nullable=False, default=list)
    frequency = Column(String(16), nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    last_notified_at = Column(String(50), nullable=True)
    notifications_sent = Column(Integer, nullable=False, default=0)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_alerts_talent", "talent_id"),
        Index("idx_alerts_frequency_active", "frequency", "active"),
    )

    def to_domain(self) -> Alert:
        return Alert(
            id=self.id,
            talent_id=self.talent_id,
            name=self.name,
            skills=list(self.skills or []),
            min_rate=self.min_rate,
            mobility=self.mobility,
            locations=list(self.locations or []),
            frequency=self.frequency,
            active=self.active,
            last_notified_at=parse_timestamp(self.last_notified_at),
            notifications_sent=self.notifications_sent,
            created_at=parse_timestamp(self.created_at),
        )

    @classmethod
    def from_domain(cls, alert: Alert) -> "AlertModel":
        return cls(
            id=alert.id,
            talent_id=alert.talent_id,
            name=alert.name,
            skills=list(alert.skills),
            min_rate=alert.min_rate,
            mobility=alert.mobility.value if alert.mobility else None,
            locations=list(alert.locations),
            frequency=alert.frequency.value,
            active=alert.active,
            last_notified_at=format_timestamp(alert.last_notified_at),
            notifications_sent=alert.notifications_sent,
            created_at=format_timestamp(alert.created_at),
        )


class NotificationModel(Base):
    """ORM model for notifications table.

    ``dedup_key`` is unique: two instant notifications for the same recipient
    and offer link cannot both be stored, whatever the interleaving of
    concurrent publish events. Digest notifications leave it NULL.
    """

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipient_id = Column(Integer, nullable=False)
    type = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(512), nullable=True)
    dedup_key = Column(String(600), nullable=True, unique=True)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_notifications_recipient_link", "recipient_id", "type", "link"),
    )

    def to_domain(self) -> Notification:
        return Notification(
            id=self.id,
            recipient_id=self.recipient_id,
            type=self.type,
            title=self.title,
            message=self.message,
            link=self.link,
            dedup_key=self.dedup_key,
            created_at=parse_timestamp(self.created_at),
        )


class DigestCursorModel(Base):
    """ORM model for digest_cursors table.

    Stores the end of the last processed periodic window per frequency.
    """

    __tablename__ = "digest_cursors"

    frequency = Column(String(16), primary_key=True)
    window_end = Column(String(50), nullable=False)


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
