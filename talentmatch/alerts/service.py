"""Alert subscription management: create, update, list, deactivate, preview."""

from contextlib import AbstractContextManager
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from talentmatch.config.models import AlertsConfig
from talentmatch.domain.models import Alert
from talentmatch.logging import get_logger
from talentmatch.matching.exceptions import TalentNotFoundError
from talentmatch.persistence import (
    AlertRepository,
    OfferRepository,
    TalentRepository,
    get_session,
)
from talentmatch.utils.timestamps import utc_now

from .exceptions import AlertLimitError, AlertNotFoundError, AlertValidationError
from .matcher import offer_matches_alert
from .models import AlertInput, AlertListing, AlertStats

logger = get_logger(__name__, component="alerts")

AlertPayload = Union[AlertInput, Mapping[str, Any]]

NO_CRITERIA_MESSAGE = "At least one criterion is required (skills, locations or minimum rate)"


def parse_alert_input(payload: AlertPayload) -> AlertInput:
    """Validate a raw alert payload.

    Raises:
        AlertValidationError: With one entry per invalid field
    """
    if isinstance(payload, AlertInput):
        return payload

    try:
        return AlertInput.model_validate(payload)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"]) or "payload"
            errors.append(f"{field_path}: {error['msg']}")
        raise AlertValidationError("Invalid alert payload", errors=errors) from e


class AlertService:
    """Manages a talent's alert subscriptions.

    Args:
        alerts_config: Alert limits and preview settings
        session_factory: Context manager yielding a transactional session
    """

    def __init__(
        self,
        alerts_config: Optional[AlertsConfig] = None,
        session_factory: Callable[[], AbstractContextManager] = get_session,
    ):
        self.alerts_config = alerts_config or AlertsConfig()
        self.session_factory = session_factory

    def create_alert(self, talent_id: int, payload: AlertPayload) -> Alert:
        """Create an alert for a talent.

        The name defaults to "Alert <n+1>" and the frequency to instant.

        Raises:
            AlertValidationError: If the payload is malformed or has no criterion
            AlertLimitError: If the talent already has the maximum number of alerts
            TalentNotFoundError: If the talent does not exist
        """
        data = parse_alert_input(payload)
        candidate = data.to_alert()
        if not candidate.has_criteria:
            raise AlertValidationError(NO_CRITERIA_MESSAGE)

        with self.session_factory() as session:
            if TalentRepository(session).get(talent_id) is None:
                raise TalentNotFoundError(talent_id)

            repo = AlertRepository(session)
            existing = repo.count_for_talent(talent_id)
            if existing >= self.alerts_config.max_alerts_per_talent:
                raise AlertLimitError(self.alerts_config.max_alerts_per_talent)

            alert = repo.create(
                candidate.model_copy(
                    update={
                        "talent_id": talent_id,
                        "name": data.name or f"Alert {existing + 1}",
                        "active": True if data.active is None else data.active,
                        "created_at": utc_now(),
                    }
                )
            )

        logger.info(
            "Alert created",
            extra={
                "event": "alerts.created",
                "alert_id": alert.id,
                "talent_id": talent_id,
                "frequency": alert.frequency.value,
            },
        )
        return alert

    def update_alert(self, talent_id: int, alert_id: int, payload: AlertPayload) -> Alert:
        """Apply a partial update (including ``active``) to a talent's alert.

        Raises:
            AlertValidationError: If the payload is malformed or removes every criterion
            AlertNotFoundError: If the alert does not exist or belongs to another talent
        """
        data = parse_alert_input(payload)
        changes = data.changes()
        if changes.get("name", "") is None:
            # Blank names keep the current one
            del changes["name"]
        for list_field in ("skills", "locations"):
            if list_field in changes and changes[list_field] is None:
                changes[list_field] = []
        if "active" in changes and changes["active"] is None:
            del changes["active"]
        if "frequency" in changes and changes["frequency"] is None:
            del changes["frequency"]

        with self.session_factory() as session:
            repo = AlertRepository(session)
            current = repo.get_for_talent(talent_id, alert_id)
            if current is None:
                raise AlertNotFoundError(alert_id)

            merged = Alert.model_validate({**current.model_dump(), **changes})
            if not merged.has_criteria:
                raise AlertValidationError(NO_CRITERIA_MESSAGE)

            alert = repo.update(alert_id, changes)

        logger.info(
            "Alert updated",
            extra={
                "event": "alerts.updated",
                "alert_id": alert_id,
                "talent_id": talent_id,
                "fields": sorted(changes),
            },
        )
        return alert

    def deactivate_alert(self, talent_id: int, alert_id: int) -> Alert:
        """Deactivate an alert. Alerts are never hard-deleted.

        Raises:
            AlertNotFoundError: If the alert does not exist or belongs to another talent
        """
        with self.session_factory() as session:
            repo = AlertRepository(session)
            if repo.get_for_talent(talent_id, alert_id) is None:
                raise AlertNotFoundError(alert_id)
            alert = repo.update(alert_id, {"active": False})

        logger.info(
            "Alert deactivated",
            extra={"event": "alerts.deactivated", "alert_id": alert_id, "talent_id": talent_id},
        )
        return alert

    def list_alerts(self, talent_id: int) -> AlertListing:
        """List a talent's alerts, newest first, with summary stats."""
        with self.session_factory() as session:
            alerts = AlertRepository(session).list_for_talent(talent_id)

        return AlertListing(
            alerts=alerts,
            stats=AlertStats(
                total=len(alerts),
                active=sum(1 for alert in alerts if alert.active),
                notifications_sent=sum(alert.notifications_sent for alert in alerts),
            ),
        )

    def preview_alert(self, payload: AlertPayload) -> int:
        """Count currently published offers an unsaved alert would match.

        Uses the same matcher as the dispatcher. Offers are only capped when
        ``preview_limit`` is configured.

        Raises:
            AlertValidationError: If the payload is malformed
        """
        alert = parse_alert_input(payload).to_alert()

        with self.session_factory() as session:
            offers = OfferRepository(session).list_published(limit=self.alerts_config.preview_limit)

        count = sum(1 for offer in offers if offer_matches_alert(offer, alert))

        logger.debug(
            "Alert preview computed",
            extra={
                "event": "alerts.previewed",
                "offers_scanned": len(offers),
                "matching_offers": count,
            },
        )
        return count
