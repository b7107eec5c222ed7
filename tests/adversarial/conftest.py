"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition tests.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from useraccounts.adapters.repository.postgres import PostgresAccountRepository
from useraccounts.domain.account import Account


@pytest.fixture(autouse=True)
def _clean(clean_database: None) -> Generator[None, None, None]:
    """Clean accounts table before each test."""
    yield


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresAccountRepository:
    """Create repository instance for each test."""
    return PostgresAccountRepository(pool)


def create_account(pool: ConnectionPool, email: str, token: str) -> Account:
    """Helper to store an account directly."""
    account = PostgresAccountRepository(pool).add(
        Account(email=email, first_name="Victim", password_hash="$2b$04$victimhash", api_token=token)
    )
    assert account is not None
    return account
