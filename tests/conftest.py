"""Shared pytest fixtures."""

import pytest

from talentmatch.logging.context import clear_log_context
from talentmatch.persistence import close_database, init_database


@pytest.fixture
def database():
    """Fresh in-memory database for the duration of one test."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Environment with every optional variable unset."""
    for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()
