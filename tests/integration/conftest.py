"""
Shared fixtures for integration tests.

Integration tests run against a real PostgreSQL database (see the session
pool fixture in tests/conftest.py) and are skipped when it is unreachable.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from useraccounts.adapters.repository.postgres import PostgresAccountRepository


@pytest.fixture
def repository(pool: ConnectionPool, clean_database: None) -> PostgresAccountRepository:
    """Create repository instance over an empty accounts table."""
    return PostgresAccountRepository(pool)


class RecordingNotifier:
    """NotificationDispatcher that records events instead of sending mail."""

    def __init__(self) -> None:
        self.events: list = []

    def dispatch(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def recording_notifier() -> Generator[RecordingNotifier, None, None]:
    yield RecordingNotifier()
