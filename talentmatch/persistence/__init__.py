"""Persistence layer for database operations (SQLAlchemy, SQLite by default).

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - TalentRepository, CalendarRepository, OfferRepository,
      ApplicationRepository: records consumed by the matching core
    - AlertRepository: alert subscriptions and their counters
    - NotificationRepository: stored notifications with dedup keys
    - DigestCursorRepository: end of the last periodic window

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from talentmatch.persistence import init_database, get_session, TalentRepository
    >>> init_database("sqlite:///./data/talent_match.db")
    >>> with get_session() as session:
    ...     talent = TalentRepository(session).get(42)
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import (
    AlertRepository,
    ApplicationRepository,
    CalendarRepository,
    DigestCursorRepository,
    NotificationRepository,
    OfferRepository,
    TalentRepository,
)

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "TalentRepository",
    "CalendarRepository",
    "OfferRepository",
    "ApplicationRepository",
    "AlertRepository",
    "NotificationRepository",
    "DigestCursorRepository",
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
