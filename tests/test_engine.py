"""Unit tests for the weighted score engine."""

from datetime import date

import pytest

from talentmatch.config.models import ScoringWeights
from talentmatch.matching.engine import (
    MISSION_CONFLICT_MESSAGE,
    RECOMMENDATION_MESSAGES,
    ScoreEngine,
    recommendation_for,
)
from talentmatch.matching.models import LocationStatus, Recommendation
from tests.helpers import make_calendar_entry, make_offer, make_talent


@pytest.fixture
def engine():
    return ScoreEngine()


def weak_talent(**overrides):
    """Talent scoring 0 on experience, 40 on rate and 30 on availability."""
    data = {
        "skills": ["Python"],
        "years_experience": 0,
        "daily_rate": 700,
        "availability": "unavailable",
    }
    data.update(overrides)
    return make_talent(**data)


def weak_offer(**overrides):
    data = {"min_experience": 5, "rate_max": 500}
    data.update(overrides)
    return make_offer(**data)


class TestRecommendationTiers:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, Recommendation.EXCELLENT),
            (80, Recommendation.EXCELLENT),
            (79, Recommendation.GOOD),
            (65, Recommendation.GOOD),
            (64, Recommendation.MEDIUM),
            (50, Recommendation.MEDIUM),
            (49, Recommendation.WEAK),
            (35, Recommendation.WEAK),
            (34, Recommendation.NOT_RECOMMENDED),
            (0, Recommendation.NOT_RECOMMENDED),
        ],
    )
    def test_boundaries(self, score, expected):
        assert recommendation_for(score) == expected


class TestScoreEngine:
    def test_strong_match(self, engine):
        result = engine.score(make_talent(), make_offer())

        assert result.score == 84
        assert result.recommendation == Recommendation.EXCELLENT
        assert result.can_apply is True
        assert result.message == RECOMMENDATION_MESSAGES[Recommendation.EXCELLENT]
        assert result.details.skills.matched == ["Java", "Spring"]
        assert result.details.skills.missing == ["Kubernetes"]
        assert result.already_applied is False

    def test_location_incompatibility_does_not_change_score(self, engine):
        talent = make_talent(mobility="full-remote")
        offer = make_offer(mobility="on-site")

        result = engine.score(talent, offer)

        assert result.score == 84
        assert result.can_apply is True
        assert result.details.location.status == LocationStatus.INCOMPATIBLE

    def test_mission_conflict_blocks_application(self, engine):
        offer = make_offer(start_date=date(2026, 1, 10))
        calendar = [make_calendar_entry(date(2026, 1, 15))]

        result = engine.score(make_talent(), offer, calendar)

        assert result.details.availability.score == 20
        assert result.score == 72
        assert result.recommendation == Recommendation.GOOD
        assert result.can_apply is False
        assert result.message == MISSION_CONFLICT_MESSAGE
        assert result.details.availability.conflicts == ["1 day(s) in mission"]

    def test_mission_conflict_overrides_profile_unavailable(self, engine):
        talent = make_talent(availability="unavailable")
        offer = make_offer(start_date=date(2026, 1, 10))
        calendar = [make_calendar_entry(date(2026, 1, 15))]

        result = engine.score(talent, offer, calendar)

        assert result.can_apply is False
        assert result.message == MISSION_CONFLICT_MESSAGE

    def test_available_soon_talent_in_mission_cannot_apply(self, engine):
        talent = make_talent(availability="within-1-month")
        offer = make_offer(start_date=date(2026, 1, 10))
        calendar = [make_calendar_entry(date(2026, 1, 15))]

        result = engine.score(talent, offer, calendar)

        assert result.details.availability.score == 80
        assert result.score == 81
        assert result.recommendation == Recommendation.EXCELLENT
        assert result.can_apply is False
        assert result.message == MISSION_CONFLICT_MESSAGE

    def test_not_recommended_without_skills_cannot_apply(self, engine):
        result = engine.score(weak_talent(), weak_offer())

        assert result.details.skills.score == 0
        assert result.score == 11
        assert result.recommendation == Recommendation.NOT_RECOMMENDED
        assert result.can_apply is False
        assert result.message == RECOMMENDATION_MESSAGES[Recommendation.NOT_RECOMMENDED]

    def test_not_recommended_with_some_skills_can_apply(self, engine):
        result = engine.score(weak_talent(skills=["Kubernetes"]), weak_offer())

        assert result.details.skills.score == 33
        assert result.score == 27
        assert result.recommendation == Recommendation.NOT_RECOMMENDED
        assert result.can_apply is True

    def test_already_applied_flag(self, engine):
        result = engine.score(make_talent(), make_offer(id=7), applied_offer_ids={7})
        assert result.already_applied is True

    def test_perfect_match_is_capped_at_100(self, engine):
        offer = make_offer(required_skills=["Java"], min_experience=None)
        result = engine.score(make_talent(), offer)

        assert result.score == 100

    def test_deterministic(self, engine):
        talent = make_talent()
        offer = make_offer(start_date=date(2026, 1, 10))
        calendar = [make_calendar_entry(date(2026, 1, 12), "leave")]

        first = engine.score(talent, offer, calendar).to_dict()
        second = engine.score(talent, offer, calendar).to_dict()

        assert first == second

    def test_custom_weights(self):
        weights = ScoringWeights(skills=1.0, experience=0.0, rate=0.0, availability=0.0)
        result = ScoreEngine(weights).score(make_talent(), make_offer())

        assert result.score == 67
        assert result.recommendation == Recommendation.GOOD


class TestMatchResultSerialization:
    def test_public_shape(self):
        result = ScoreEngine().score(make_talent(daily_rate=None), make_offer(rate_min=400))
        data = result.to_dict()

        assert set(data) == {"score", "canApply", "recommendation", "message", "details", "alreadyApplied"}
        assert data["score"] == 81
        assert data["recommendation"] == "excellent"
        assert data["details"]["rate"] == {
            "offerMin": 400,
            "offerMax": None,
            "actual": None,
            "status": "not-provided",
            "message": "Set your daily rate for a more accurate match",
        }
        assert data["details"]["location"]["status"] == "ok"
        assert data["details"]["availability"]["conflicts"] == []
