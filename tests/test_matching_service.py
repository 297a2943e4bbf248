"""Tests for repository-backed scoring and ranking."""

from datetime import timedelta

import pytest

from talentmatch.matching import MatchingService, OfferNotFoundError, TalentNotFoundError
from talentmatch.matching.engine import MISSION_CONFLICT_MESSAGE
from talentmatch.domain.models import OfferStatus
from talentmatch.utils.timestamps import utc_today
from tests.helpers import DEFAULT_PUBLISHED_AT, make_calendar_entry, make_offer, make_talent, seed


@pytest.fixture
def service():
    return MatchingService()


class TestScoreOffer:
    def test_resolves_offer_by_id_uid_and_slug(self, database, service):
        seed(talents=[make_talent()], offers=[make_offer(id=5, uid="abc123", slug="java-dev")])

        by_id = service.score_offer(1, 5)
        by_uid = service.score_offer(1, "abc123")
        by_slug = service.score_offer(1, "java-dev")

        assert by_id.score == by_uid.score == by_slug.score == 84

    def test_unknown_talent(self, database, service):
        seed(offers=[make_offer()])

        with pytest.raises(TalentNotFoundError):
            service.score_offer(99, 1)

    def test_unpublished_offer_is_not_found(self, database, service):
        seed(talents=[make_talent()], offers=[make_offer(status=OfferStatus.DRAFT, published_at=None)])

        with pytest.raises(OfferNotFoundError):
            service.score_offer(1, 1)

    def test_unknown_offer(self, database, service):
        seed(talents=[make_talent()])

        with pytest.raises(OfferNotFoundError):
            service.score_offer(1, "missing")

    def test_calendar_is_read_from_the_database(self, database, service):
        start = utc_today() + timedelta(days=10)
        seed(
            talents=[make_talent()],
            offers=[make_offer(start_date=start)],
            calendar=[make_calendar_entry(start + timedelta(days=2))],
        )

        result = service.score_offer(1, 1)

        assert result.can_apply is False
        assert result.message == MISSION_CONFLICT_MESSAGE
        assert result.details.availability.conflicts == ["1 day(s) in mission"]

    def test_past_calendar_entries_are_ignored(self, database, service):
        start = utc_today() - timedelta(days=5)
        seed(
            talents=[make_talent()],
            offers=[make_offer(start_date=start)],
            calendar=[make_calendar_entry(start)],
        )

        result = service.score_offer(1, 1)

        assert result.details.availability.score == 100

    def test_other_talents_calendar_is_ignored(self, database, service):
        start = utc_today() + timedelta(days=10)
        seed(
            talents=[make_talent(id=1), make_talent(id=2, user_id=200)],
            offers=[make_offer(start_date=start)],
            calendar=[make_calendar_entry(start, talent_id=2)],
        )

        assert service.score_offer(1, 1).can_apply is True

    def test_already_applied(self, database, service):
        seed(talents=[make_talent()], offers=[make_offer()], applications=[(1, 1)])

        assert service.score_offer(1, 1).already_applied is True


class TestRankOffers:
    @pytest.fixture
    def offers(self):
        return [
            make_offer(id=1, required_skills=["Java"]),
            make_offer(id=2),
            make_offer(id=3, required_skills=["Cobol"]),
            make_offer(id=4, required_skills=["Java"], published_at=DEFAULT_PUBLISHED_AT + timedelta(hours=1)),
            make_offer(id=5, status=OfferStatus.CLOSED),
        ]

    def test_best_first(self, database, service, offers):
        seed(talents=[make_talent()], offers=offers)

        ranking = service.rank_offers(1)

        assert [entry.offer_id for entry in ranking.entries] == [4, 1, 2, 3]
        assert [entry.score for entry in ranking.entries] == [100, 100, 84, 50]

    def test_stats(self, database, service, offers):
        seed(talents=[make_talent()], offers=offers, applications=[(1, 2)])

        stats = service.rank_offers(1).stats

        assert stats.total == 4
        assert stats.excellent == 3
        assert stats.good == 0
        assert stats.already_applied == 1

    def test_min_score(self, database, service, offers):
        seed(talents=[make_talent()], offers=offers)

        ranking = service.rank_offers(1, min_score=85)

        assert [entry.offer_id for entry in ranking.entries] == [4, 1]
        assert ranking.stats.total == 2

    def test_unknown_talent(self, database, service):
        with pytest.raises(TalentNotFoundError):
            service.rank_offers(1)
