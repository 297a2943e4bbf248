"""Core domain models for talents, offers, calendars, and alerts.

These are the normalized records the scoring core consumes. Optional fields
are explicit ``Optional`` types and every record is validated once when it is
built, so the matching code can assume well-formed input:

- TalentProfile: contractor profile (skills, experience, daily rate...)
- CalendarEntry: one day of a talent's planning
- Offer: job posting
- Alert: standing subscription of a talent to new offers
- Notification: notification record produced by the alert dispatcher
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from talentmatch.utils.timestamps import add_days, ensure_utc

DEFAULT_MISSION_LENGTH_DAYS = 90


class Availability(str, Enum):
    """Availability declared on a talent profile."""

    IMMEDIATE = "immediate"
    WITHIN_15_DAYS = "within-15-days"
    WITHIN_1_MONTH = "within-1-month"
    WITHIN_2_MONTHS = "within-2-months"
    UNAVAILABLE = "unavailable"


class Mobility(str, Enum):
    """Remote/on-site preference of a talent or requirement of an offer."""

    FULL_REMOTE = "full-remote"
    HYBRID = "hybrid"
    ON_SITE = "on-site"
    FLEXIBLE = "flexible"


class CalendarEntryType(str, Enum):
    """Kind of day recorded in a talent's planning."""

    IN_MISSION = "in-mission"
    LEAVE = "leave"
    SICK_LEAVE = "sick-leave"
    UNAVAILABLE = "unavailable"
    OTHER = "other"


# Entry types that make a talent unavailable on that day
UNAVAILABILITY_TYPES = frozenset({
    CalendarEntryType.IN_MISSION,
    CalendarEntryType.LEAVE,
    CalendarEntryType.SICK_LEAVE,
    CalendarEntryType.UNAVAILABLE,
})


class OfferStatus(str, Enum):
    """Offer lifecycle status. Only published offers are matchable."""

    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


class AlertFrequency(str, Enum):
    """How often an alert is evaluated."""

    INSTANT = "instant"
    DAILY = "daily"
    WEEKLY = "weekly"


def _clean_skills(values: List[str], dedupe: bool = True) -> List[str]:
    """Strip entries and drop blanks (and case-insensitive duplicates when dedupe)."""
    cleaned = []
    seen = set()
    for value in values:
        stripped = value.strip()
        if not stripped:
            continue
        if dedupe:
            if stripped.lower() in seen:
                continue
            seen.add(stripped.lower())
        cleaned.append(stripped)
    return cleaned


def _clean_optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class TalentProfile(BaseModel):
    """Normalized contractor profile.

    ``user_id`` is the account that receives notifications; a talent without
    an account still gets scored but cannot be notified.
    """

    id: int = Field(..., description="Talent identifier")
    user_id: Optional[int] = Field(None, description="Recipient id for notifications")
    skills: List[str] = Field(default_factory=list, description="Declared skills")
    years_experience: Optional[int] = Field(None, ge=0, description="Years of experience")
    daily_rate: Optional[int] = Field(None, ge=0, description="Daily rate (TJM)")
    availability: Availability = Field(Availability.IMMEDIATE, description="Declared availability")
    mobility: Mobility = Field(Mobility.FLEXIBLE, description="Mobility preference")
    location: Optional[str] = Field(None, description="Free-text location")

    @field_validator("skills")
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        return _clean_skills(v)

    @field_validator("location")
    @classmethod
    def clean_location(cls, v: Optional[str]) -> Optional[str]:
        return _clean_optional_text(v)


class CalendarEntry(BaseModel):
    """One day in a talent's planning."""

    talent_id: int
    entry_date: date
    entry_type: CalendarEntryType

    @property
    def is_unavailability(self) -> bool:
        return self.entry_type in UNAVAILABILITY_TYPES


class Offer(BaseModel):
    """Normalized job posting."""

    id: int = Field(..., description="Internal identifier")
    uid: str = Field(..., min_length=1, description="Public identifier used in links")
    slug: Optional[str] = Field(None, description="Human-readable public identifier")
    title: str = Field(..., min_length=1, description="Offer title")
    company_name: Optional[str] = Field(None, description="Client company name")
    required_skills: List[str] = Field(default_factory=list)
    desired_skills: List[str] = Field(default_factory=list)
    min_experience: Optional[int] = Field(None, ge=0, description="Minimum years of experience")
    rate_min: Optional[int] = Field(None, ge=0, description="Lower bound of the daily rate range")
    rate_max: Optional[int] = Field(None, ge=0, description="Upper bound of the daily rate range")
    mobility: Mobility = Field(Mobility.FLEXIBLE, description="Mobility requirement")
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: OfferStatus = OfferStatus.DRAFT
    published_at: Optional[datetime] = Field(None, description="Publication timestamp (UTC)")

    @field_validator("required_skills", "desired_skills")
    @classmethod
    def clean_skills(cls, v: List[str]) -> List[str]:
        # Repeated entries each count toward the required total
        return _clean_skills(v, dedupe=False)

    @field_validator("title", "uid")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @field_validator("slug", "company_name", "location")
    @classmethod
    def clean_optional_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_optional_text(v)

    @field_validator("published_at")
    @classmethod
    def ensure_published_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def is_published(self) -> bool:
        return self.status == OfferStatus.PUBLISHED

    def mission_window(self) -> Optional[Tuple[date, date]]:
        """Return the (start, end) dates used for calendar conflicts.

        Returns None when the offer has no start date. A missing end date
        defaults to start + 90 days.
        """
        if self.start_date is None:
            return None
        end = self.end_date or add_days(self.start_date, DEFAULT_MISSION_LENGTH_DAYS)
        return self.start_date, end


class Alert(BaseModel):
    """Standing subscription of a talent to newly published offers."""

    id: Optional[int] = Field(None, description="None for unsaved (preview) alerts")
    talent_id: Optional[int] = None
    name: str = ""
    skills: List[str] = Field(default_factory=list)
    min_rate: Optional[int] = Field(None, ge=0)
    mobility: Optional[Mobility] = None
    locations: List[str] = Field(default_factory=list)
    frequency: AlertFrequency = AlertFrequency.INSTANT
    active: bool = True
    last_notified_at: Optional[datetime] = None
    notifications_sent: int = Field(0, ge=0)
    created_at: Optional[datetime] = None

    @field_validator("skills", "locations")
    @classmethod
    def clean_terms(cls, v: List[str]) -> List[str]:
        return _clean_skills(v)

    @field_validator("last_notified_at", "created_at")
    @classmethod
    def ensure_timestamps_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def has_criteria(self) -> bool:
        """True when at least one of skills, locations, or min rate is set."""
        return bool(self.skills or self.locations or self.min_rate)


class Notification(BaseModel):
    """Notification record as stored by the notification sink."""

    id: int
    recipient_id: int
    type: str
    title: str
    message: str
    link: Optional[str] = None
    dedup_key: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_created_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)
