"""Unit tests for the score dimension evaluators."""

from datetime import date, timedelta

import pytest

from talentmatch.matching.evaluators import (
    evaluate_availability,
    evaluate_experience,
    evaluate_location,
    evaluate_rate,
    evaluate_skills,
    round_half_up,
)
from talentmatch.matching.models import (
    AvailabilityStatus,
    ExperienceStatus,
    LocationStatus,
    RateStatus,
)
from tests.helpers import make_calendar_entry, make_offer, make_talent

START = date(2026, 4, 1)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(83.5, 84), (83.49, 83), (66.666, 67), (0.5, 1), (2.5, 3), (100.0, 100)],
    )
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestSkillsEvaluator:
    def test_partial_coverage(self):
        result = evaluate_skills(make_talent(), make_offer())

        assert result.matched == ["Java", "Spring"]
        assert result.missing == ["Kubernetes"]
        assert result.score == 67

    def test_no_required_skills_scores_100(self):
        result = evaluate_skills(make_talent(skills=[]), make_offer(required_skills=[]))
        assert result.score == 100

    def test_desired_skills_are_bonus_only(self):
        offer = make_offer(required_skills=["Kubernetes"], desired_skills=["Angular", "Vue"])
        result = evaluate_skills(make_talent(), offer)

        assert result.bonus == ["Angular"]
        assert result.score == 0

    def test_repeated_required_skills_each_count(self):
        offer = make_offer(required_skills=["Java", "java", "Kubernetes"])
        result = evaluate_skills(make_talent(skills=["Java"]), offer)

        assert result.matched == ["Java", "java"]
        assert result.missing == ["Kubernetes"]
        assert result.score == 67


class TestExperienceEvaluator:
    @pytest.mark.parametrize("min_experience", [None, 0])
    def test_no_minimum(self, min_experience):
        result = evaluate_experience(make_talent(years_experience=1), make_offer(min_experience=min_experience))
        assert result.score == 100
        assert result.status == ExperienceStatus.OK

    def test_each_missing_year_costs_20(self):
        result = evaluate_experience(make_talent(years_experience=2), make_offer(min_experience=5))

        assert result.score == 40
        assert result.status == ExperienceStatus.INSUFFICIENT
        assert result.message == "You are missing 3 year(s) of experience"

    def test_floor_at_zero(self):
        result = evaluate_experience(make_talent(years_experience=0), make_offer(min_experience=10))
        assert result.score == 0

    def test_unknown_experience_counts_as_zero(self):
        result = evaluate_experience(make_talent(years_experience=None), make_offer(min_experience=3))

        assert result.actual == 0
        assert result.score == 40

    def test_overqualified(self):
        result = evaluate_experience(make_talent(years_experience=11), make_offer(min_experience=5))

        assert result.score == 90
        assert result.status == ExperienceStatus.OVERQUALIFIED

    def test_five_extra_years_is_ok(self):
        result = evaluate_experience(make_talent(years_experience=10), make_offer(min_experience=5))
        assert result.score == 100


class TestRateEvaluator:
    @pytest.mark.parametrize("daily_rate", [None, 0])
    def test_rate_not_provided(self, daily_rate):
        result = evaluate_rate(make_talent(daily_rate=daily_rate), make_offer(rate_max=500))

        assert result.score == 80
        assert result.status == RateStatus.NOT_PROVIDED

    def test_too_high(self):
        result = evaluate_rate(make_talent(daily_rate=700), make_offer(rate_max=500))

        assert result.score == 40
        assert result.status == RateStatus.TOO_HIGH
        assert result.offer_max == 500

    def test_tolerance_above_max(self):
        result = evaluate_rate(make_talent(daily_rate=600), make_offer(rate_max=500))
        assert result.status == RateStatus.OK

    def test_too_low(self):
        result = evaluate_rate(make_talent(daily_rate=300), make_offer(rate_min=500))

        assert result.score == 70
        assert result.status == RateStatus.TOO_LOW

    def test_tolerance_below_min(self):
        result = evaluate_rate(make_talent(daily_rate=350), make_offer(rate_min=500))
        assert result.score == 100

    def test_no_offer_range(self):
        result = evaluate_rate(make_talent(daily_rate=500), make_offer())
        assert result.score == 100


class TestAvailabilityEvaluator:
    def test_no_start_date_ignores_calendar(self):
        calendar = [make_calendar_entry(START)]
        result = evaluate_availability(make_talent(), make_offer(), calendar)

        assert result.score == 100
        assert result.status == AvailabilityStatus.AVAILABLE
        assert not result.mission_conflict

    def test_mission_conflict(self):
        calendar = [make_calendar_entry(START + timedelta(days=3))]
        result = evaluate_availability(make_talent(), make_offer(start_date=START), calendar)

        assert result.score == 20
        assert result.status == AvailabilityStatus.IN_MISSION
        assert result.conflicts == ["1 day(s) in mission"]
        assert result.mission_conflict

    def test_leave_and_sick_days(self):
        calendar = [
            make_calendar_entry(START, "leave"),
            make_calendar_entry(START + timedelta(days=1), "leave"),
            make_calendar_entry(START + timedelta(days=2), "sick-leave"),
        ]
        result = evaluate_availability(make_talent(), make_offer(start_date=START), calendar)

        assert result.score == 60
        assert result.status == AvailabilityStatus.UNAVAILABLE
        assert result.conflicts == ["2 day(s) of leave", "1 day(s) of sick leave"]

    def test_other_entries_ignored(self):
        calendar = [make_calendar_entry(START, "other")]
        result = evaluate_availability(make_talent(), make_offer(start_date=START), calendar)
        assert result.score == 100

    def test_default_window_is_inclusive_90_days(self):
        offer = make_offer(start_date=START)

        last_day = [make_calendar_entry(START + timedelta(days=90))]
        after = [make_calendar_entry(START + timedelta(days=91))]

        assert evaluate_availability(make_talent(), offer, last_day).score == 20
        assert evaluate_availability(make_talent(), offer, after).score == 100

    def test_explicit_end_date(self):
        offer = make_offer(start_date=START, end_date=START + timedelta(days=10))
        calendar = [make_calendar_entry(START + timedelta(days=11))]

        assert evaluate_availability(make_talent(), offer, calendar).score == 100

    def test_profile_unavailable_forces_30(self):
        talent = make_talent(availability="unavailable")
        result = evaluate_availability(talent, make_offer(), [])

        assert result.score == 30
        assert result.status == AvailabilityStatus.UNAVAILABLE

    def test_profile_unavailable_keeps_mission_flag(self):
        talent = make_talent(availability="unavailable")
        calendar = [make_calendar_entry(START)]
        result = evaluate_availability(talent, make_offer(start_date=START), calendar)

        assert result.score == 30
        assert result.mission_conflict

    @pytest.mark.parametrize("availability", ["within-1-month", "within-2-months"])
    def test_available_soon(self, availability):
        result = evaluate_availability(make_talent(availability=availability), make_offer(), [])

        assert result.score == 80
        assert result.status == AvailabilityStatus.SOON

    def test_available_soon_overrides_calendar_conflicts(self):
        talent = make_talent(availability="within-1-month")
        calendar = [make_calendar_entry(START, "leave")]
        result = evaluate_availability(talent, make_offer(start_date=START), calendar)

        assert result.score == 80
        assert result.status == AvailabilityStatus.SOON
        assert result.conflicts == ["1 day(s) of leave"]
        assert not result.mission_conflict

    def test_available_soon_keeps_mission_flag(self):
        talent = make_talent(availability="within-2-months")
        calendar = [make_calendar_entry(START)]
        result = evaluate_availability(talent, make_offer(start_date=START), calendar)

        assert result.score == 80
        assert result.status == AvailabilityStatus.SOON
        assert result.mission_conflict

    def test_within_15_days_keeps_calendar_result(self):
        talent = make_talent(availability="within-15-days")
        result = evaluate_availability(talent, make_offer(), [])

        assert result.score == 100
        assert result.status == AvailabilityStatus.AVAILABLE


class TestLocationEvaluator:
    def test_on_site_offer_full_remote_talent(self):
        result = evaluate_location(make_talent(mobility="full-remote"), make_offer(mobility="on-site"))

        assert result.status == LocationStatus.INCOMPATIBLE
        assert not result.is_compatible

    @pytest.mark.parametrize("mobility", ["hybrid", "on-site", "flexible"])
    def test_compatible(self, mobility):
        result = evaluate_location(make_talent(mobility=mobility), make_offer(mobility="on-site"))
        assert result.status == LocationStatus.OK
