"""Disjunctive matching of offers against alert subscriptions.

An offer matches an alert as soon as ONE criterion fires: skills, rate,
location or mobility. This is much wider than the score engine; an alert for
React jobs in Paris also fires for any offer whose max rate reaches the
alert's minimum rate.
"""

from talentmatch.domain.models import Alert, Mobility, Offer
from talentmatch.matching.skills import skills_overlap

# Offer mobilities accepted by each alert mobility preference
ACCEPTED_MOBILITIES = {
    Mobility.FULL_REMOTE: frozenset({Mobility.FULL_REMOTE}),
    Mobility.HYBRID: frozenset({Mobility.HYBRID, Mobility.FULL_REMOTE}),
    Mobility.ON_SITE: frozenset(),
    Mobility.FLEXIBLE: frozenset(Mobility),
}


def skills_match(offer: Offer, alert: Alert) -> bool:
    offer_skills = offer.required_skills + offer.desired_skills
    return bool(alert.skills and offer_skills) and skills_overlap(alert.skills, offer_skills)


def rate_match(offer: Offer, alert: Alert) -> bool:
    # Zero means unset on both sides
    return bool(alert.min_rate and offer.rate_max) and offer.rate_max >= alert.min_rate


def location_match(offer: Offer, alert: Alert) -> bool:
    if not alert.locations or not offer.location:
        return False
    offer_location = offer.location.lower()
    return any(
        place.lower() in offer_location or offer_location in place.lower()
        for place in alert.locations
    )


def mobility_match(offer: Offer, alert: Alert) -> bool:
    if alert.mobility is None:
        return False
    return offer.mobility in ACCEPTED_MOBILITIES[alert.mobility]


def offer_matches_alert(offer: Offer, alert: Alert) -> bool:
    """Check whether an offer should be notified for an alert.

    Args:
        offer: Published offer
        alert: Alert subscription (saved or ad-hoc)

    Returns:
        True if any of the skills, rate, location or mobility criteria match.
        An alert without any criterion never matches.
    """
    return (
        skills_match(offer, alert)
        or rate_match(offer, alert)
        or location_match(offer, alert)
        or mobility_match(offer, alert)
    )
