"""Alert payloads and dispatcher result types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from talentmatch.domain.models import Alert, AlertFrequency, Mobility


def _normalize_choice(value: Any) -> Any:
    """Accept enum names in any case ("FULL_REMOTE", "Daily") as well as values."""
    if isinstance(value, str):
        return value.strip().lower().replace("_", "-")
    return value


class AlertInput(BaseModel):
    """Alert subscription payload as received from a caller.

    Every field is optional so the same model serves creation, partial
    updates and previews. Field names and their public aliases (``tjmMin``,
    ``mobilite``, ``lieux``, ``frequence``) are both accepted.
    """

    name: Optional[str] = Field(None, max_length=255, validation_alias=AliasChoices("name", "nom"))
    skills: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("skills", "competences")
    )
    min_rate: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("min_rate", "tjmMin")
    )
    mobility: Optional[Mobility] = Field(
        None, validation_alias=AliasChoices("mobility", "mobilite")
    )
    locations: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("locations", "lieux")
    )
    frequency: Optional[AlertFrequency] = Field(
        None, validation_alias=AliasChoices("frequency", "frequence")
    )
    active: Optional[bool] = None

    model_config = {"extra": "forbid"}

    @field_validator("mobility", "frequency", mode="before")
    @classmethod
    def normalize_choices(cls, v: Any) -> Any:
        return _normalize_choice(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    def changes(self) -> dict:
        """Return only the fields the caller actually sent."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def to_alert(self) -> Alert:
        """Build an unsaved alert (used by previews)."""
        return Alert(
            name=self.name or "",
            skills=self.skills or [],
            min_rate=self.min_rate,
            mobility=self.mobility,
            locations=self.locations or [],
            frequency=self.frequency or AlertFrequency.INSTANT,
        )


@dataclass
class AlertStats:
    total: int = 0
    active: int = 0
    notifications_sent: int = 0


@dataclass
class AlertListing:
    """A talent's alerts (newest first) with summary counters."""

    alerts: List[Alert] = field(default_factory=list)
    stats: AlertStats = field(default_factory=AlertStats)


@dataclass
class DispatchResult:
    """
    Outcome of one dispatcher invocation.

    Attributes:
        frequency: Alert frequency processed (instant, daily or weekly)
        started_at: UTC time the run started
        offer_id: Offer that triggered an instant dispatch
        window_start: Inclusive start of a periodic window
        window_end: Exclusive end of a periodic window
        offers_considered: Offers evaluated against the alerts
        alerts_evaluated: Active alerts of the frequency
        alerts_matched: Alerts with at least one matching offer
        notifications_sent: Notifications created
        offers_notified: Sum of the counter increments applied to alerts
        duplicates: Notifications not created because one already existed
        skipped_no_recipient: Matching alerts whose talent has no account
        failures: Alerts whose notification could not be created
        skipped: Whether the run was skipped because another run held the lock
    """

    frequency: AlertFrequency
    started_at: datetime
    offer_id: Optional[int] = None
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    offers_considered: int = 0
    alerts_evaluated: int = 0
    alerts_matched: int = 0
    notifications_sent: int = 0
    offers_notified: int = 0
    duplicates: int = 0
    skipped_no_recipient: int = 0
    failures: int = 0
    skipped: bool = False

    @property
    def had_failures(self) -> bool:
        return self.failures > 0
