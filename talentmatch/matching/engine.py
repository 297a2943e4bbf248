"""Weighted score engine combining the dimension evaluators.

The engine is pure: it takes already-fetched records and never touches the
database. Repository-backed orchestration lives in ``MatchingService``.
"""

from typing import AbstractSet, Iterable, Optional

from talentmatch.config.models import DEFAULT_WEIGHTS, ScoringWeights
from talentmatch.domain.models import CalendarEntry, Offer, TalentProfile
from talentmatch.logging import get_logger

from .evaluators import (
    evaluate_availability,
    evaluate_experience,
    evaluate_location,
    evaluate_rate,
    evaluate_skills,
    round_half_up,
)
from .models import MatchDetails, MatchResult, Recommendation

logger = get_logger(__name__, component="matching")

EXCELLENT_THRESHOLD = 80
GOOD_THRESHOLD = 65
MEDIUM_THRESHOLD = 50
WEAK_THRESHOLD = 35
MIN_SKILL_SCORE_TO_APPLY = 30

RECOMMENDATION_MESSAGES = {
    Recommendation.EXCELLENT: (
        "Your profile is a great fit for this mission. We strongly encourage you to apply!"
    ),
    Recommendation.GOOD: (
        "Your profile fits this mission well. You have a good chance of being selected."
    ),
    Recommendation.MEDIUM: (
        "Your profile partially fits this mission. Some points could be improved."
    ),
    Recommendation.WEAK: (
        "Weak match. You can apply but your chances are limited."
    ),
    Recommendation.NOT_RECOMMENDED: (
        "This mission does not fit your current profile. We do not recommend applying."
    ),
}

MISSION_CONFLICT_MESSAGE = (
    "You cannot apply because you already have a mission during this period."
)


def recommendation_for(score: int) -> Recommendation:
    """Map a final score to its recommendation tier."""
    if score >= EXCELLENT_THRESHOLD:
        return Recommendation.EXCELLENT
    if score >= GOOD_THRESHOLD:
        return Recommendation.GOOD
    if score >= MEDIUM_THRESHOLD:
        return Recommendation.MEDIUM
    if score >= WEAK_THRESHOLD:
        return Recommendation.WEAK
    return Recommendation.NOT_RECOMMENDED


class ScoreEngine:
    """Computes explainable MatchResults for (talent, offer) pairs.

    Args:
        weights: Dimension weights; defaults to 0.50/0.20/0.15/0.15
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or DEFAULT_WEIGHTS

    def score(
        self,
        talent: TalentProfile,
        offer: Offer,
        calendar: Iterable[CalendarEntry] = (),
        applied_offer_ids: AbstractSet[int] = frozenset(),
    ) -> MatchResult:
        """Score one talent against one offer.

        Args:
            talent: Talent profile
            offer: Offer to score against
            calendar: Talent's calendar entries (any range; filtered to the
                offer's mission window)
            applied_offer_ids: Ids of offers the talent already applied to

        Returns:
            MatchResult with the final score, tier and per-dimension details
        """
        skills = evaluate_skills(talent, offer)
        experience = evaluate_experience(talent, offer)
        rate = evaluate_rate(talent, offer)
        availability = evaluate_availability(talent, offer, calendar)
        location = evaluate_location(talent, offer)

        weighted = (
            skills.score * self.weights.skills
            + experience.score * self.weights.experience
            + rate.score * self.weights.rate
            + availability.score * self.weights.availability
        )
        final_score = min(100, max(0, round_half_up(weighted)))

        recommendation = recommendation_for(final_score)
        message = RECOMMENDATION_MESSAGES[recommendation]
        if recommendation == Recommendation.NOT_RECOMMENDED:
            can_apply = skills.score >= MIN_SKILL_SCORE_TO_APPLY
        else:
            can_apply = True

        if availability.mission_conflict:
            can_apply = False
            message = MISSION_CONFLICT_MESSAGE

        result = MatchResult(
            score=final_score,
            can_apply=can_apply,
            recommendation=recommendation,
            message=message,
            details=MatchDetails(
                skills=skills,
                experience=experience,
                rate=rate,
                availability=availability,
                location=location,
            ),
            already_applied=offer.id in applied_offer_ids,
        )

        logger.debug(
            "Offer scored",
            extra={
                "event": "matching.scored",
                "talent_id": talent.id,
                "offer_id": offer.id,
                "score": final_score,
                "recommendation": recommendation.value,
                "can_apply": can_apply,
                "location_status": location.status.value,
            },
        )

        return result
