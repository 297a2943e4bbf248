"""Tests for instant and periodic alert dispatch."""

from datetime import datetime, timedelta, timezone

import pytest

from talentmatch.alerts import AlertDispatcher
from talentmatch.config.models import AlertsConfig
from talentmatch.domain.models import AlertFrequency, OfferStatus
from talentmatch.matching.exceptions import OfferNotFoundError
from talentmatch.notifications import (
    DatabaseNotificationSink,
    NotificationSinkError,
    NotificationTemplateError,
    TemplateRenderer,
)
from talentmatch.persistence import DigestCursorRepository, NotificationRepository, get_session
from tests.helpers import get_alert, make_alert, make_offer, make_talent, seed

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)


def notifications_for(recipient_id):
    with get_session() as session:
        return NotificationRepository(session).list_for_recipient(recipient_id)


class BlindSink(DatabaseNotificationSink):
    """Sink that never sees existing notifications, so only the unique key dedups."""

    def has_notification(self, recipient_id, notification_type, link):
        return False


class FailingSink(DatabaseNotificationSink):
    """Sink that cannot store notifications for recipient 100."""

    def create(self, request):
        if request.recipient_id == 100:
            raise NotificationSinkError("delivery backend unavailable")
        return super().create(request)


class BrokenRenderer(TemplateRenderer):
    def render_instant(self, context):
        raise NotificationTemplateError("Template rendering failed: boom")

    def render_digest(self, context):
        raise NotificationTemplateError("Template rendering failed: boom")


@pytest.fixture
def dispatcher():
    return AlertDispatcher()


class TestInstantDispatch:
    """Tests for notifications on offer publication."""

    @pytest.fixture
    def react_offer(self):
        return make_offer(title="Frontend developer", required_skills=["React", "Node"])

    def test_matching_alert_is_notified_once(self, database, dispatcher, react_offer):
        (alert,) = seed(
            talents=[make_talent()],
            offers=[react_offer],
            alerts=[make_alert(name="React jobs", skills=["react"])],
        )

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.alerts_evaluated == 1
        assert result.alerts_matched == 1
        assert result.notifications_sent == 1
        assert result.duplicates == 0

        (notification,) = notifications_for(100)
        assert notification.type == "NEW_OFFER_MATCH"
        assert notification.title == "New offer matching your criteria"
        assert notification.message == (
            '"Frontend developer" at Acme matches your alert "React jobs"'
        )
        assert notification.link == "/offers/offer-1"

        stored = get_alert(1, alert.id)
        assert stored.notifications_sent == 1
        assert stored.last_notified_at is not None

    def test_replay_does_not_notify_twice(self, database, dispatcher, react_offer):
        seed(talents=[make_talent()], offers=[react_offer], alerts=[make_alert(skills=["react"])])

        dispatcher.dispatch_instant(react_offer.id)
        second = dispatcher.dispatch_instant(react_offer.id)

        assert second.notifications_sent == 0
        assert second.duplicates == 1
        assert len(notifications_for(100)) == 1

    def test_unique_key_rejects_duplicate(self, database, react_offer):
        seed(talents=[make_talent()], offers=[react_offer], alerts=[make_alert(skills=["react"])])
        dispatcher = AlertDispatcher(sink_factory=BlindSink)

        dispatcher.dispatch_instant(react_offer.id)
        second = dispatcher.dispatch_instant(react_offer.id)

        assert second.duplicates == 1
        assert second.failures == 0
        assert len(notifications_for(100)) == 1

    def test_two_alerts_of_one_talent_give_one_notification(
        self, database, dispatcher, react_offer
    ):
        seed(
            talents=[make_talent()],
            offers=[react_offer],
            alerts=[make_alert(skills=["react"]), make_alert(skills=["node"])],
        )

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.alerts_matched == 2
        assert result.notifications_sent == 1
        assert result.duplicates == 1
        assert len(notifications_for(100)) == 1

    def test_custom_link_prefix(self, database, react_offer):
        seed(talents=[make_talent()], offers=[react_offer], alerts=[make_alert(skills=["react"])])
        dispatcher = AlertDispatcher(AlertsConfig(offer_link_prefix="jobs/"))

        dispatcher.dispatch_instant(react_offer.id)

        assert notifications_for(100)[0].link == "/jobs/offer-1"

    def test_unpublished_offer_raises(self, database, dispatcher):
        draft = make_offer(status=OfferStatus.DRAFT, published_at=None)
        seed(talents=[make_talent()], offers=[draft], alerts=[make_alert(skills=["java"])])

        with pytest.raises(OfferNotFoundError):
            dispatcher.dispatch_instant(draft.id)

        assert notifications_for(100) == []

    def test_missing_offer_raises(self, database, dispatcher):
        with pytest.raises(OfferNotFoundError):
            dispatcher.dispatch_instant(999)

    def test_only_active_instant_alerts_are_evaluated(self, database, dispatcher, react_offer):
        seed(
            talents=[make_talent()],
            offers=[react_offer],
            alerts=[
                make_alert(skills=["react"], active=False),
                make_alert(skills=["react"], frequency=AlertFrequency.DAILY),
            ],
        )

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.alerts_evaluated == 0
        assert notifications_for(100) == []

    def test_non_matching_alert(self, database, dispatcher, react_offer):
        seed(talents=[make_talent()], offers=[react_offer], alerts=[make_alert(skills=["cobol"])])

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.alerts_evaluated == 1
        assert result.alerts_matched == 0
        assert notifications_for(100) == []

    def test_talent_without_account_is_skipped(self, database, dispatcher, react_offer):
        seed(
            talents=[make_talent(user_id=None)],
            offers=[react_offer],
            alerts=[make_alert(skills=["react"])],
        )

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.skipped_no_recipient == 1
        assert result.notifications_sent == 0

    def test_sink_failure_does_not_block_other_alerts(self, database, react_offer):
        (first, second) = seed(
            talents=[make_talent(id=1, user_id=100), make_talent(id=2, user_id=200)],
            offers=[react_offer],
            alerts=[make_alert(talent_id=1, skills=["react"]), make_alert(talent_id=2, skills=["react"])],
        )
        dispatcher = AlertDispatcher(sink_factory=FailingSink)

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.failures == 1
        assert result.had_failures
        assert result.notifications_sent == 1
        assert notifications_for(100) == []
        assert len(notifications_for(200)) == 1
        assert get_alert(1, first.id).notifications_sent == 0
        assert get_alert(2, second.id).notifications_sent == 1

    def test_template_failure_is_counted(self, database, react_offer):
        seed(talents=[make_talent()], offers=[react_offer], alerts=[make_alert(skills=["react"])])
        dispatcher = AlertDispatcher(renderer=BrokenRenderer())

        result = dispatcher.dispatch_instant(react_offer.id)

        assert result.failures == 1
        assert notifications_for(100) == []


class TestPeriodicDispatch:
    """Tests for daily and weekly summaries."""

    def daily_alert(self, **overrides):
        data = {"name": "Java digest", "skills": ["java"], "frequency": AlertFrequency.DAILY}
        data.update(overrides)
        return make_alert(**data)

    def test_one_summary_per_alert(self, database, dispatcher):
        (alert,) = seed(
            talents=[make_talent()],
            offers=[
                make_offer(id=1, published_at=NOW - timedelta(hours=3)),
                make_offer(id=2, published_at=NOW - timedelta(hours=5)),
                make_offer(id=3, required_skills=["Cobol"], published_at=NOW - timedelta(hours=1)),
            ],
            alerts=[self.daily_alert()],
        )

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.offers_considered == 3
        assert result.alerts_matched == 1
        assert result.notifications_sent == 1
        assert result.offers_notified == 2

        (notification,) = notifications_for(100)
        assert notification.title == "Daily summary"
        assert notification.message == '2 new offers match your alert "Java digest"'
        assert notification.link == "/offers"
        assert get_alert(1, alert.id).notifications_sent == 2

    def test_singular_message(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )

        dispatcher.dispatch_periodic(AlertFrequency.DAILY, now=NOW)

        assert notifications_for(100)[0].message == '1 new offer matches your alert "Java digest"'

    def test_window_is_half_open(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[
                make_offer(id=1, published_at=NOW - timedelta(days=1)),
                make_offer(id=2, published_at=NOW),
                make_offer(id=3, published_at=NOW - timedelta(days=1, seconds=1)),
            ],
            alerts=[self.daily_alert()],
        )

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.window_start == NOW - timedelta(days=1)
        assert result.window_end == NOW
        assert result.offers_considered == 1

    def test_consecutive_windows_do_not_overlap(self, database, dispatcher):
        (alert,) = seed(
            talents=[make_talent()],
            offers=[
                make_offer(id=1, published_at=NOW - timedelta(hours=2)),
                make_offer(id=2, published_at=NOW),
            ],
            alerts=[self.daily_alert()],
        )

        first = dispatcher.dispatch_periodic("daily", now=NOW)
        # Early rerun: starts where the previous window ended
        second = dispatcher.dispatch_periodic("daily", now=NOW + timedelta(hours=1))

        assert first.offers_notified == 1
        assert second.window_start == NOW
        assert second.offers_considered == 1
        assert second.offers_notified == 1
        assert len(notifications_for(100)) == 2
        assert get_alert(1, alert.id).notifications_sent == 2

        with get_session() as session:
            assert DigestCursorRepository(session).get(AlertFrequency.DAILY) == NOW + timedelta(hours=1)

    def test_already_processed_window(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )

        dispatcher.dispatch_periodic("daily", now=NOW)
        replay = dispatcher.dispatch_periodic("daily", now=NOW)

        assert replay.window_start == NOW
        assert replay.alerts_evaluated == 0
        assert replay.notifications_sent == 0
        assert len(notifications_for(100)) == 1

    def test_weekly_window(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[
                make_offer(id=1, published_at=NOW - timedelta(days=6)),
                make_offer(id=2, published_at=NOW - timedelta(days=8)),
            ],
            alerts=[self.daily_alert(frequency=AlertFrequency.WEEKLY)],
        )

        result = dispatcher.dispatch_periodic("weekly", now=NOW)

        assert result.window_start == NOW - timedelta(days=7)
        assert result.offers_considered == 1
        assert notifications_for(100)[0].title == "Weekly summary"

    def test_draft_offers_are_ignored(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[make_offer(status=OfferStatus.CLOSED, published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.offers_considered == 0
        assert notifications_for(100) == []

    def test_no_match_sends_nothing(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert(skills=["cobol"])],
        )

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.alerts_evaluated == 1
        assert result.alerts_matched == 0
        assert notifications_for(100) == []

    def test_talent_without_account_is_skipped(self, database, dispatcher):
        seed(
            talents=[make_talent(user_id=None)],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.skipped_no_recipient == 1
        assert result.notifications_sent == 0

    def test_sink_failure_does_not_block_other_summaries(self, database):
        (first, second) = seed(
            talents=[make_talent(id=1, user_id=100), make_talent(id=2, user_id=200)],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert(talent_id=1), self.daily_alert(talent_id=2)],
        )
        dispatcher = AlertDispatcher(sink_factory=FailingSink)

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.alerts_matched == 2
        assert result.failures == 1
        assert result.notifications_sent == 1
        assert notifications_for(100) == []
        assert len(notifications_for(200)) == 1
        assert get_alert(1, first.id).notifications_sent == 0
        assert get_alert(1, first.id).last_notified_at is None
        assert get_alert(2, second.id).notifications_sent == 1

        with get_session() as session:
            assert DigestCursorRepository(session).get(AlertFrequency.DAILY) == NOW

    def test_template_failure_is_counted(self, database):
        seed(
            talents=[make_talent()],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )
        dispatcher = AlertDispatcher(renderer=BrokenRenderer())

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.failures == 1
        assert result.notifications_sent == 0
        assert notifications_for(100) == []

    def test_cursor_advances_without_offers(self, database, dispatcher):
        seed(talents=[make_talent()], alerts=[self.daily_alert()])

        result = dispatcher.dispatch_periodic("daily", now=NOW)

        assert result.offers_considered == 0
        assert result.notifications_sent == 0
        with get_session() as session:
            assert DigestCursorRepository(session).get(AlertFrequency.DAILY) == NOW

    def test_run_in_progress_is_skipped(self, database, dispatcher):
        seed(
            talents=[make_talent()],
            offers=[make_offer(published_at=NOW - timedelta(hours=2))],
            alerts=[self.daily_alert()],
        )

        lock = dispatcher._periodic_locks[AlertFrequency.DAILY]
        lock.acquire()
        try:
            skipped = dispatcher.dispatch_periodic("daily", now=NOW)
            weekly = dispatcher.dispatch_periodic("weekly", now=NOW)
        finally:
            lock.release()

        assert skipped.skipped is True
        assert skipped.notifications_sent == 0
        assert weekly.skipped is False
        assert notifications_for(100) == []

    @pytest.mark.parametrize("frequency", ["instant", "hourly"])
    def test_invalid_frequency(self, database, dispatcher, frequency):
        with pytest.raises(ValueError):
            dispatcher.dispatch_periodic(frequency, now=NOW)
