"""Alert subscription exceptions."""

from typing import List, Optional

from talentmatch.matching.exceptions import NotFoundError


class AlertError(Exception):
    """Base exception for alert subscription errors."""

    pass


class AlertValidationError(AlertError):
    """Raised when an alert payload is malformed.

    Attributes:
        errors: One readable entry per invalid field
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = errors or []
        full_message = message
        if self.errors:
            full_message += ": " + "; ".join(self.errors)
        super().__init__(full_message)


class AlertNotFoundError(AlertError, NotFoundError):
    """Raised when an alert does not exist or belongs to another talent."""

    def __init__(self, alert_id: int):
        self.alert_id = alert_id
        super().__init__(f"Alert not found: {alert_id}")


class AlertLimitError(AlertError):
    """Raised when a talent already has the maximum number of alerts."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Alert limit reached ({limit} alerts maximum)")
