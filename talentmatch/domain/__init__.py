"""Domain models for the talent matching service."""

from .models import (
    Alert,
    AlertFrequency,
    Availability,
    CalendarEntry,
    CalendarEntryType,
    Mobility,
    Notification,
    Offer,
    OfferStatus,
    TalentProfile,
)

__all__ = [
    "Alert",
    "AlertFrequency",
    "Availability",
    "CalendarEntry",
    "CalendarEntryType",
    "Mobility",
    "Notification",
    "Offer",
    "OfferStatus",
    "TalentProfile",
]
