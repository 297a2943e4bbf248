"""Alert dispatch: instant notifications on publish and periodic digests."""

import threading
from contextlib import AbstractContextManager
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Union
from uuid import uuid4

from sqlalchemy.orm import Session

from talentmatch.config.models import AlertsConfig
from talentmatch.domain.models import Alert, AlertFrequency, Offer
from talentmatch.logging import get_logger
from talentmatch.logging.context import log_context
from talentmatch.matching.exceptions import OfferNotFoundError
from talentmatch.notifications import (
    NEW_OFFER_MATCH,
    DatabaseNotificationSink,
    DuplicateNotificationError,
    NotificationRequest,
    NotificationSink,
    NotificationSinkError,
    NotificationTemplateError,
    TemplateRenderer,
)
from talentmatch.persistence import (
    AlertRepository,
    DigestCursorRepository,
    OfferRepository,
    get_session,
)
from talentmatch.utils.timestamps import ensure_utc, utc_now

from .matcher import offer_matches_alert
from .models import DispatchResult

logger = get_logger(__name__, component="alerts")

PERIODS = {
    AlertFrequency.DAILY: timedelta(days=1),
    AlertFrequency.WEEKLY: timedelta(days=7),
}


class AlertDispatcher:
    """
    Evaluates active alerts against published offers and notifies talents.

    Instant alerts are evaluated once per published offer; each recipient
    gets at most one notification per offer link, enforced by the sink's
    unique dedup key. Daily and weekly alerts are evaluated over half-open
    windows that never overlap: each window starts where the previous one
    of the same frequency ended (or one period ago, whichever is later).
    """

    def __init__(
        self,
        alerts_config: Optional[AlertsConfig] = None,
        renderer: Optional[TemplateRenderer] = None,
        sink_factory: Callable[[Session], NotificationSink] = DatabaseNotificationSink,
        session_factory: Callable[[], AbstractContextManager] = get_session,
    ):
        """
        Initialize the dispatcher.

        Args:
            alerts_config: Alert settings (offer link prefix)
            renderer: Template renderer for titles and messages
            sink_factory: Builds the notification sink for a session
            session_factory: Context manager yielding a transactional session
        """
        self.alerts_config = alerts_config or AlertsConfig()
        self.renderer = renderer or TemplateRenderer()
        self.sink_factory = sink_factory
        self.session_factory = session_factory
        self._periodic_locks: Dict[AlertFrequency, threading.Lock] = {
            frequency: threading.Lock() for frequency in PERIODS
        }

    def offer_link(self, offer: Offer) -> str:
        return f"{self.alerts_config.offer_link_prefix}/{offer.uid}"

    def dispatch_instant(self, offer_id: int) -> DispatchResult:
        """
        Notify instant alerts matching a newly published offer.

        Safe to replay: a recipient who already has a notification for the
        offer link is counted as a duplicate and not notified again.

        Args:
            offer_id: Id of the offer that was just published

        Returns:
            DispatchResult with per-run counters

        Raises:
            OfferNotFoundError: If the offer does not exist or is not published
            PersistenceError: If the batch cannot be read or committed
        """
        result = DispatchResult(
            frequency=AlertFrequency.INSTANT, started_at=utc_now(), offer_id=offer_id
        )

        with log_context(dispatch_id=uuid4().hex, frequency="instant", offer_id=offer_id):
            with self.session_factory() as session:
                offer = OfferRepository(session).get(offer_id)
                if offer is None or not offer.is_published:
                    raise OfferNotFoundError(offer_id)

                alert_repo = AlertRepository(session)
                sink = self.sink_factory(session)
                link = self.offer_link(offer)
                result.offers_considered = 1

                for alert, recipient_id in alert_repo.get_active_by_frequency(
                    AlertFrequency.INSTANT
                ):
                    result.alerts_evaluated += 1
                    if not offer_matches_alert(offer, alert):
                        continue

                    result.alerts_matched += 1
                    if recipient_id is None:
                        self._log_no_recipient(alert, result)
                        continue

                    try:
                        if sink.has_notification(recipient_id, NEW_OFFER_MATCH, link):
                            result.duplicates += 1
                            continue

                        title, message = self.renderer.render_instant(
                            {
                                "offer_title": offer.title,
                                "company_name": offer.company_name,
                                "alert_name": alert.name,
                            }
                        )
                        sink.create(
                            NotificationRequest(
                                recipient_id=recipient_id,
                                type=NEW_OFFER_MATCH,
                                title=title,
                                message=message,
                                link=link,
                                dedup_key=f"{recipient_id}:{link}",
                            )
                        )
                    except DuplicateNotificationError:
                        result.duplicates += 1
                        logger.info(
                            "Notification already exists, skipping",
                            extra={
                                "event": "alerts.instant.duplicate",
                                "alert_id": alert.id,
                                "recipient_id": recipient_id,
                            },
                        )
                        continue
                    except (NotificationSinkError, NotificationTemplateError) as e:
                        self._log_failure(alert, recipient_id, e, result)
                        continue

                    alert_repo.record_notification(alert.id, 1, utc_now())
                    result.notifications_sent += 1
                    result.offers_notified += 1

            logger.info(
                "Instant alerts dispatched",
                extra={
                    "event": "alerts.instant.completed",
                    "alerts_evaluated": result.alerts_evaluated,
                    "alerts_matched": result.alerts_matched,
                    "notifications_sent": result.notifications_sent,
                    "duplicates": result.duplicates,
                    "failures": result.failures,
                },
            )

        return result

    def dispatch_periodic(
        self,
        frequency: Union[AlertFrequency, str],
        now: Optional[datetime] = None,
    ) -> DispatchResult:
        """
        Send one summary per daily or weekly alert with matching offers.

        The window is ``[start, now)`` where start is the later of
        ``now - period`` and the end of the previous window. Each alert with
        at least one match gets one notification and its counter grows by
        the number of matching offers.

        Args:
            frequency: "daily" or "weekly"
            now: End of the window (defaults to the current UTC time)

        Returns:
            DispatchResult; ``skipped`` is True when a run of the same
            frequency is already in progress

        Raises:
            ValueError: If frequency is not a periodic frequency
            PersistenceError: If the batch cannot be read or committed
        """
        frequency = AlertFrequency(frequency)
        if frequency not in PERIODS:
            raise ValueError(f"Not a periodic alert frequency: {frequency.value}")

        window_end = ensure_utc(now) or utc_now()
        result = DispatchResult(frequency=frequency, started_at=utc_now(), window_end=window_end)

        lock = self._periodic_locks[frequency]
        if not lock.acquire(blocking=False):
            logger.warning(
                "Periodic dispatch skipped: previous run still in progress",
                extra={
                    "event": "alerts.periodic.skipped",
                    "frequency": frequency.value,
                    "reason": "lock_held",
                },
            )
            result.skipped = True
            return result

        try:
            with log_context(dispatch_id=uuid4().hex, frequency=frequency.value):
                with self.session_factory() as session:
                    self._run_periodic(session, frequency, window_end, result)

                logger.info(
                    "Periodic alerts dispatched",
                    extra={
                        "event": "alerts.periodic.completed",
                        "window_start": result.window_start,
                        "window_end": result.window_end,
                        "offers_considered": result.offers_considered,
                        "alerts_evaluated": result.alerts_evaluated,
                        "alerts_matched": result.alerts_matched,
                        "notifications_sent": result.notifications_sent,
                        "offers_notified": result.offers_notified,
                        "failures": result.failures,
                    },
                )
        finally:
            lock.release()

        return result

    def _run_periodic(
        self,
        session: Session,
        frequency: AlertFrequency,
        window_end: datetime,
        result: DispatchResult,
    ) -> None:
        cursor_repo = DigestCursorRepository(session)
        window_start = window_end - PERIODS[frequency]
        previous_end = cursor_repo.get(frequency)
        if previous_end is not None and previous_end > window_start:
            window_start = previous_end
        result.window_start = window_start

        if window_start >= window_end:
            logger.info(
                "Periodic window already processed",
                extra={
                    "event": "alerts.periodic.window_empty",
                    "previous_window_end": previous_end,
                },
            )
            return

        offers = OfferRepository(session).list_published_between(window_start, window_end)
        result.offers_considered = len(offers)

        alert_repo = AlertRepository(session)
        sink = self.sink_factory(session)

        for alert, recipient_id in alert_repo.get_active_by_frequency(frequency):
            result.alerts_evaluated += 1
            matching = [offer for offer in offers if offer_matches_alert(offer, alert)]
            if not matching:
                continue

            result.alerts_matched += 1
            if recipient_id is None:
                self._log_no_recipient(alert, result)
                continue

            try:
                title, message = self.renderer.render_digest(
                    {
                        "frequency": frequency.value,
                        "offer_count": len(matching),
                        "alert_name": alert.name,
                    }
                )
                sink.create(
                    NotificationRequest(
                        recipient_id=recipient_id,
                        type=NEW_OFFER_MATCH,
                        title=title,
                        message=message,
                        link=self.alerts_config.offer_link_prefix,
                    )
                )
            except (NotificationSinkError, NotificationTemplateError) as e:
                self._log_failure(alert, recipient_id, e, result)
                continue

            alert_repo.record_notification(alert.id, len(matching), utc_now())
            result.notifications_sent += 1
            result.offers_notified += len(matching)

        cursor_repo.set(frequency, window_end)

    def _log_no_recipient(self, alert: Alert, result: DispatchResult) -> None:
        result.skipped_no_recipient += 1
        logger.info(
            "Matching alert skipped: talent has no account to notify",
            extra={
                "event": "alerts.recipient.missing",
                "alert_id": alert.id,
                "talent_id": alert.talent_id,
            },
        )

    def _log_failure(
        self, alert: Alert, recipient_id: int, error: Exception, result: DispatchResult
    ) -> None:
        result.failures += 1
        logger.error(
            f"Failed to notify alert {alert.id}: {error}",
            extra={
                "event": "alerts.notification.failed",
                "alert_id": alert.id,
                "recipient_id": recipient_id,
                "error_type": type(error).__name__,
            },
        )
