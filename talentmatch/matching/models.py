"""Data models for match scoring results.

Each dimension evaluator returns its own result dataclass; the score engine
assembles them into a MatchResult. ``MatchResult.to_dict()`` produces the
public output shape (camelCase keys, enum values as strings).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Recommendation(str, Enum):
    """Recommendation tier derived from the final score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MEDIUM = "medium"
    WEAK = "weak"
    NOT_RECOMMENDED = "not-recommended"


class ExperienceStatus(str, Enum):
    OK = "ok"
    INSUFFICIENT = "insufficient"
    OVERQUALIFIED = "overqualified"


class RateStatus(str, Enum):
    OK = "ok"
    TOO_HIGH = "too-high"
    TOO_LOW = "too-low"
    NOT_PROVIDED = "not-provided"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    SOON = "soon"
    UNAVAILABLE = "unavailable"
    IN_MISSION = "in-mission"


class LocationStatus(str, Enum):
    OK = "ok"
    INCOMPATIBLE = "incompatible"


@dataclass
class SkillsResult:
    """Skill coverage of the offer's required skills.

    Attributes:
        matched: Required skills the talent satisfies
        missing: Required skills the talent does not satisfy
        bonus: Desired skills the talent satisfies (display only)
        score: Sub-score in [0, 100]
    """

    matched: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    bonus: List[str] = field(default_factory=list)
    score: int = 100


@dataclass
class ExperienceResult:
    required: Optional[int]
    actual: int
    status: ExperienceStatus
    message: str
    score: int


@dataclass
class RateResult:
    offer_min: Optional[int]
    offer_max: Optional[int]
    actual: Optional[int]
    status: RateStatus
    message: str
    score: int


@dataclass
class AvailabilityResult:
    """Availability over the offer's mission window.

    ``mission_conflict`` stays True whenever an in-mission day falls inside
    the window, even if a profile-level status replaced the reported status.
    """

    status: AvailabilityStatus
    message: str
    score: int
    conflicts: List[str] = field(default_factory=list)
    mission_conflict: bool = False


@dataclass
class LocationResult:
    status: LocationStatus
    message: str

    @property
    def is_compatible(self) -> bool:
        return self.status != LocationStatus.INCOMPATIBLE


@dataclass
class MatchDetails:
    skills: SkillsResult
    experience: ExperienceResult
    rate: RateResult
    availability: AvailabilityResult
    location: LocationResult


@dataclass
class MatchResult:
    """Explainable compatibility between one talent and one offer.

    Attributes:
        score: Final weighted score in [0, 100]
        can_apply: Whether the talent may apply
        recommendation: Recommendation tier
        message: Top-level message shown to the talent
        details: Per-dimension breakdown
        already_applied: Whether the talent already applied to the offer
    """

    score: int
    can_apply: bool
    recommendation: Recommendation
    message: str
    details: MatchDetails
    already_applied: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the public MatchResult shape."""
        details = self.details
        return {
            "score": self.score,
            "canApply": self.can_apply,
            "recommendation": self.recommendation.value,
            "message": self.message,
            "details": {
                "skills": {
                    "matched": list(details.skills.matched),
                    "missing": list(details.skills.missing),
                    "bonus": list(details.skills.bonus),
                    "score": details.skills.score,
                },
                "experience": {
                    "required": details.experience.required,
                    "actual": details.experience.actual,
                    "status": details.experience.status.value,
                    "message": details.experience.message,
                },
                "rate": {
                    "offerMin": details.rate.offer_min,
                    "offerMax": details.rate.offer_max,
                    "actual": details.rate.actual,
                    "status": details.rate.status.value,
                    "message": details.rate.message,
                },
                "availability": {
                    "status": details.availability.status.value,
                    "message": details.availability.message,
                    "conflicts": list(details.availability.conflicts),
                },
                "location": {
                    "status": details.location.status.value,
                    "message": details.location.message,
                },
            },
            "alreadyApplied": self.already_applied,
        }


@dataclass
class RankedOffer:
    """One entry of a talent's ranked offer list."""

    offer_id: int
    offer_uid: str
    title: str
    result: MatchResult

    @property
    def score(self) -> int:
        return self.result.score


@dataclass
class RankingStats:
    total: int = 0
    excellent: int = 0
    good: int = 0
    already_applied: int = 0


@dataclass
class OfferRanking:
    """Published offers ranked for a talent, best first."""

    talent_id: int
    entries: List[RankedOffer] = field(default_factory=list)
    stats: RankingStats = field(default_factory=RankingStats)
