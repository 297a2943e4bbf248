"""Compatibility scoring between talents and offers.

- match_skills / skills_overlap: fuzzy skill matching
- ScoreEngine: pure weighted scoring producing a MatchResult
- MatchingService: repository-backed scoring and ranking
"""

from .engine import ScoreEngine, recommendation_for
from .exceptions import NotFoundError, OfferNotFoundError, TalentNotFoundError
from .models import (
    AvailabilityStatus,
    ExperienceStatus,
    LocationStatus,
    MatchResult,
    OfferRanking,
    RankedOffer,
    RateStatus,
    Recommendation,
)
from .service import MatchingService
from .skills import match_skills, missing_skills, skill_matches, skills_overlap

__all__ = [
    "ScoreEngine",
    "MatchingService",
    "MatchResult",
    "OfferRanking",
    "RankedOffer",
    "Recommendation",
    "ExperienceStatus",
    "RateStatus",
    "AvailabilityStatus",
    "LocationStatus",
    "recommendation_for",
    "match_skills",
    "missing_skills",
    "skill_matches",
    "skills_overlap",
    "NotFoundError",
    "TalentNotFoundError",
    "OfferNotFoundError",
]
