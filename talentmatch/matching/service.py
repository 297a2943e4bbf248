"""Repository-backed scoring: fetch the records, then call the pure engine."""

from contextlib import AbstractContextManager
from typing import Callable, Optional, Union

from talentmatch.logging import get_logger
from talentmatch.persistence import (
    ApplicationRepository,
    CalendarRepository,
    OfferRepository,
    TalentRepository,
    get_session,
)
from talentmatch.utils.timestamps import utc_today

from .engine import ScoreEngine
from .exceptions import OfferNotFoundError, TalentNotFoundError
from .models import MatchResult, OfferRanking, RankedOffer, RankingStats

logger = get_logger(__name__, component="matching")

STATS_EXCELLENT_MIN = 80
STATS_GOOD_MIN = 60


class MatchingService:
    """Scores published offers for a talent.

    Args:
        engine: Score engine (default weights when omitted)
        session_factory: Context manager yielding a transactional session
    """

    def __init__(
        self,
        engine: Optional[ScoreEngine] = None,
        session_factory: Callable[[], AbstractContextManager] = get_session,
    ):
        self.engine = engine or ScoreEngine()
        self.session_factory = session_factory

    def score_offer(self, talent_id: int, offer_ref: Union[int, str]) -> MatchResult:
        """Score one published offer for a talent.

        Args:
            talent_id: Talent identifier
            offer_ref: Offer id, public uid, or slug

        Raises:
            TalentNotFoundError: If the talent does not exist
            OfferNotFoundError: If no published offer matches ``offer_ref``
        """
        with self.session_factory() as session:
            talent = TalentRepository(session).get(talent_id)
            if talent is None:
                raise TalentNotFoundError(talent_id)

            offer = OfferRepository(session).get_published_by_ref(offer_ref)
            if offer is None:
                raise OfferNotFoundError(offer_ref)

            calendar = CalendarRepository(session).get_unavailability_from(talent_id, utc_today())
            applied = ApplicationRepository(session).applied_offer_ids(talent_id)

        return self.engine.score(talent, offer, calendar, applied)

    def rank_offers(self, talent_id: int, min_score: int = 0) -> OfferRanking:
        """Score every published offer for a talent, best first.

        Args:
            talent_id: Talent identifier
            min_score: Drop offers scoring below this value

        Raises:
            TalentNotFoundError: If the talent does not exist
        """
        with self.session_factory() as session:
            talent = TalentRepository(session).get(talent_id)
            if talent is None:
                raise TalentNotFoundError(talent_id)

            offers = OfferRepository(session).list_published()
            calendar = CalendarRepository(session).get_unavailability_from(talent_id, utc_today())
            applied = ApplicationRepository(session).applied_offer_ids(talent_id)

        entries = []
        for offer in offers:
            result = self.engine.score(talent, offer, calendar, applied)
            if result.score >= min_score:
                entries.append(
                    RankedOffer(offer_id=offer.id, offer_uid=offer.uid, title=offer.title, result=result)
                )

        # Stable sort keeps the most recently published first among equal scores
        entries.sort(key=lambda entry: entry.score, reverse=True)

        stats = RankingStats(
            total=len(entries),
            excellent=sum(1 for e in entries if e.score >= STATS_EXCELLENT_MIN),
            good=sum(1 for e in entries if STATS_GOOD_MIN <= e.score < STATS_EXCELLENT_MIN),
            already_applied=sum(1 for e in entries if e.result.already_applied),
        )

        logger.info(
            "Offers ranked",
            extra={
                "event": "matching.ranked",
                "talent_id": talent_id,
                "offers_scored": len(offers),
                "offers_returned": stats.total,
                "min_score": min_score,
            },
        )

        return OfferRanking(talent_id=talent_id, entries=entries, stats=stats)
