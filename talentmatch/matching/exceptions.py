"""Lookup failures surfaced by the matching and alert services."""


class NotFoundError(Exception):
    """Base exception for identifiers that do not resolve."""

    pass


class TalentNotFoundError(NotFoundError):
    """Raised when a talent id does not resolve to a profile."""

    def __init__(self, talent_id):
        self.talent_id = talent_id
        super().__init__(f"Talent not found: {talent_id}")


class OfferNotFoundError(NotFoundError):
    """Raised when an offer reference does not resolve to a published offer."""

    def __init__(self, offer_ref):
        self.offer_ref = offer_ref
        super().__init__(f"Published offer not found: {offer_ref}")
