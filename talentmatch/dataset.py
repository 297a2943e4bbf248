"""Load talents, offers, calendars and applications from a YAML dataset.

Profiles and offers are owned by other services; this loader lets the CLI
and local environments populate the tables the matching core reads.

Example dataset::

    talents:
      - {id: 1, user_id: 10, skills: [Python, Django], years_experience: 5}
    calendar:
      - {talent_id: 1, entry_date: 2026-03-02, entry_type: in-mission}
    offers:
      - {id: 7, uid: off-7, title: Backend developer, status: published,
         published_at: "2026-03-01T09:00:00Z", required_skills: [Python]}
    applications:
      - {talent_id: 1, offer_id: 7}
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field, ValidationError

from talentmatch.domain.models import CalendarEntry, Offer, TalentProfile
from talentmatch.logging import get_logger
from talentmatch.persistence import (
    ApplicationRepository,
    CalendarRepository,
    OfferRepository,
    TalentRepository,
    get_session,
)
from talentmatch.utils.timestamps import utc_now

logger = get_logger(__name__, component="dataset")


class DatasetError(Exception):
    """Raised when a dataset file cannot be read or is invalid."""

    pass


class ApplicationRecord(BaseModel):
    talent_id: int
    offer_id: int


class Dataset(BaseModel):
    talents: List[TalentProfile] = Field(default_factory=list)
    calendar: List[CalendarEntry] = Field(default_factory=list)
    offers: List[Offer] = Field(default_factory=list)
    applications: List[ApplicationRecord] = Field(default_factory=list)


@dataclass
class LoadSummary:
    talents: int = 0
    calendar_entries: int = 0
    offers: int = 0
    applications: int = 0


def read_dataset(path: Path) -> Dataset:
    """Read and validate a dataset file.

    Raises:
        DatasetError: If the file is unreadable, not YAML, or fails validation
    """
    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise DatasetError(f"Failed to parse dataset {path}: {e}") from e
    except OSError as e:
        raise DatasetError(f"Failed to read dataset {path}: {e}") from e

    return parse_dataset(raw)


def parse_dataset(raw: Dict[str, Any]) -> Dataset:
    if not isinstance(raw, dict):
        raise DatasetError("Dataset must contain a mapping at the top level")
    try:
        return Dataset.model_validate(raw)
    except ValidationError as e:
        errors = "; ".join(
            f"{' -> '.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise DatasetError(f"Invalid dataset: {errors}") from e


def load_dataset(dataset: Dataset) -> LoadSummary:
    """Upsert talents and offers, then add calendar entries and applications.

    Runs in a single transaction: nothing is stored if any record fails.
    """
    with get_session() as session:
        talent_repo = TalentRepository(session)
        offer_repo = OfferRepository(session)

        for talent in dataset.talents:
            talent_repo.upsert(talent)
        for offer in dataset.offers:
            offer_repo.upsert(offer)

        CalendarRepository(session).add_entries(dataset.calendar)

        application_repo = ApplicationRepository(session)
        now = utc_now()
        for application in dataset.applications:
            application_repo.add(application.talent_id, application.offer_id, now)

    summary = LoadSummary(
        talents=len(dataset.talents),
        calendar_entries=len(dataset.calendar),
        offers=len(dataset.offers),
        applications=len(dataset.applications),
    )
    logger.info(
        "Dataset loaded",
        extra={
            "event": "dataset.loaded",
            "talents": summary.talents,
            "calendar_entries": summary.calendar_entries,
            "offers": summary.offers,
            "applications": summary.applications,
        },
    )
    return summary
