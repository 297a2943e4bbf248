"""Dimension evaluators for the score engine.

Each evaluator is a pure function of the talent profile and the offer (plus
the calendar for availability) and returns a bounded sub-score with a status
and message. Missing optional data never raises: it resolves to a documented
neutral score instead.
"""

import math
from typing import Iterable

from talentmatch.domain.models import (
    Availability,
    CalendarEntry,
    CalendarEntryType,
    Mobility,
    Offer,
    TalentProfile,
)

from .models import (
    AvailabilityResult,
    AvailabilityStatus,
    ExperienceResult,
    ExperienceStatus,
    LocationResult,
    LocationStatus,
    RateResult,
    RateStatus,
    SkillsResult,
)
from .skills import match_skills

MISSING_YEAR_PENALTY = 20
OVERQUALIFIED_YEARS = 5
OVERQUALIFIED_SCORE = 90

RATE_NOT_PROVIDED_SCORE = 80
RATE_TOO_HIGH_FACTOR = 1.2
RATE_TOO_HIGH_SCORE = 40
RATE_TOO_LOW_FACTOR = 0.7
RATE_TOO_LOW_SCORE = 70

MISSION_CONFLICT_SCORE = 20
OTHER_CONFLICT_SCORE = 60
PROFILE_UNAVAILABLE_SCORE = 30
AVAILABLE_SOON_SCORE = 80

# Profile statuses that keep the calendar-derived availability
READY_STATUSES = frozenset({Availability.IMMEDIATE, Availability.WITHIN_15_DAYS})


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def evaluate_skills(talent: TalentProfile, offer: Offer) -> SkillsResult:
    """Score the share of required skills the talent covers.

    An offer without required skills scores 100. Desired skills are reported
    as bonus and never change the score.
    """
    matched = match_skills(talent.skills, offer.required_skills)
    matched_set = set(matched)
    missing = [skill for skill in offer.required_skills if skill not in matched_set]
    bonus = match_skills(talent.skills, offer.desired_skills)

    if offer.required_skills:
        score = round_half_up(len(matched) / len(offer.required_skills) * 100)
    else:
        score = 100

    return SkillsResult(matched=matched, missing=missing, bonus=bonus, score=score)


def evaluate_experience(talent: TalentProfile, offer: Offer) -> ExperienceResult:
    """Compare the talent's years of experience with the offer minimum.

    Each missing year costs 20 points; more than five extra years is a mild
    overqualification penalty (90). A zero or missing minimum means no
    requirement, and an unknown talent experience counts as zero years.
    """
    actual = talent.years_experience or 0
    required = offer.min_experience

    if not required:
        return ExperienceResult(
            required=required,
            actual=actual,
            status=ExperienceStatus.OK,
            message="Experience matches the mission",
            score=100,
        )

    diff = actual - required
    if diff < 0:
        return ExperienceResult(
            required=required,
            actual=actual,
            status=ExperienceStatus.INSUFFICIENT,
            message=f"You are missing {abs(diff)} year(s) of experience",
            score=max(0, 100 + diff * MISSING_YEAR_PENALTY),
        )

    if diff > OVERQUALIFIED_YEARS:
        return ExperienceResult(
            required=required,
            actual=actual,
            status=ExperienceStatus.OVERQUALIFIED,
            message="You are overqualified for this mission",
            score=OVERQUALIFIED_SCORE,
        )

    return ExperienceResult(
        required=required,
        actual=actual,
        status=ExperienceStatus.OK,
        message="Experience matches the mission",
        score=100,
    )


def evaluate_rate(talent: TalentProfile, offer: Offer) -> RateResult:
    """Compare the talent's daily rate with the offer's rate range."""
    rate = talent.daily_rate

    def result(status: RateStatus, message: str, score: int) -> RateResult:
        return RateResult(
            offer_min=offer.rate_min,
            offer_max=offer.rate_max,
            actual=rate,
            status=status,
            message=message,
            score=score,
        )

    if not rate:
        return result(
            RateStatus.NOT_PROVIDED,
            "Set your daily rate for a more accurate match",
            RATE_NOT_PROVIDED_SCORE,
        )

    if offer.rate_max and rate > offer.rate_max * RATE_TOO_HIGH_FACTOR:
        return result(
            RateStatus.TOO_HIGH,
            f"Your daily rate ({rate}€) is above the range (max {offer.rate_max}€)",
            RATE_TOO_HIGH_SCORE,
        )

    if offer.rate_min and rate < offer.rate_min * RATE_TOO_LOW_FACTOR:
        return result(
            RateStatus.TOO_LOW,
            f"Your daily rate ({rate}€) is below the range",
            RATE_TOO_LOW_SCORE,
        )

    return result(RateStatus.OK, "Daily rate is compatible", 100)


def evaluate_availability(
    talent: TalentProfile, offer: Offer, calendar: Iterable[CalendarEntry]
) -> AvailabilityResult:
    """Check the talent's planning and declared availability.

    Calendar entries are only considered when the offer has a start date;
    the window runs from the start date to the end date (or start + 90 days),
    both inclusive.
    """
    status = AvailabilityStatus.AVAILABLE
    message = "You are available"
    score = 100
    conflicts = []
    mission_conflict = False

    window = offer.mission_window()
    if window is not None:
        start, end = window
        in_window = [
            entry for entry in calendar
            if entry.is_unavailability and start <= entry.entry_date <= end
        ]

        mission_days = sum(1 for e in in_window if e.entry_type == CalendarEntryType.IN_MISSION)
        if mission_days:
            mission_conflict = True
            status = AvailabilityStatus.IN_MISSION
            message = "You already have a mission during this period"
            score = MISSION_CONFLICT_SCORE
            conflicts.append(f"{mission_days} day(s) in mission")
        elif in_window:
            status = AvailabilityStatus.UNAVAILABLE
            message = "You have unavailable days during this period"
            score = OTHER_CONFLICT_SCORE
            leave_days = sum(1 for e in in_window if e.entry_type == CalendarEntryType.LEAVE)
            sick_days = sum(1 for e in in_window if e.entry_type == CalendarEntryType.SICK_LEAVE)
            if leave_days:
                conflicts.append(f"{leave_days} day(s) of leave")
            if sick_days:
                conflicts.append(f"{sick_days} day(s) of sick leave")

    if talent.availability == Availability.UNAVAILABLE:
        status = AvailabilityStatus.UNAVAILABLE
        message = "Your profile says you are not available"
        score = PROFILE_UNAVAILABLE_SCORE
    elif talent.availability not in READY_STATUSES:
        # Replaces the calendar result; mission_conflict still vetoes applying
        status = AvailabilityStatus.SOON
        message = "Available soon"
        score = AVAILABLE_SOON_SCORE

    return AvailabilityResult(
        status=status,
        message=message,
        score=score,
        conflicts=conflicts,
        mission_conflict=mission_conflict,
    )


def evaluate_location(talent: TalentProfile, offer: Offer) -> LocationResult:
    """Flag on-site offers for talents who only work fully remote."""
    if offer.mobility == Mobility.ON_SITE and talent.mobility == Mobility.FULL_REMOTE:
        return LocationResult(
            status=LocationStatus.INCOMPATIBLE,
            message="This mission requires on-site presence",
        )

    return LocationResult(status=LocationStatus.OK, message="Location is compatible")
