"""Alert subscriptions and their dispatch.

- offer_matches_alert: disjunctive offer/alert check
- AlertDispatcher: instant and periodic (daily/weekly) notification dispatch
- AlertService: create, update, list, deactivate and preview alerts
"""

from .dispatcher import AlertDispatcher
from .exceptions import AlertError, AlertLimitError, AlertNotFoundError, AlertValidationError
from .matcher import offer_matches_alert
from .models import AlertInput, AlertListing, AlertStats, DispatchResult
from .service import AlertService, parse_alert_input

__all__ = [
    "AlertDispatcher",
    "AlertService",
    "offer_matches_alert",
    "parse_alert_input",
    "AlertInput",
    "AlertListing",
    "AlertStats",
    "DispatchResult",
    "AlertError",
    "AlertValidationError",
    "AlertNotFoundError",
    "AlertLimitError",
]
