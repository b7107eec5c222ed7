"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Sample domain accounts
- Account service wiring with mocked ports
- PostgreSQL connection pool and table cleanup for database tests
"""

from collections.abc import Generator
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from useraccounts.adapters.repository.postgres import run_migrations
from useraccounts.config.settings import get_settings
from useraccounts.domain.account import ROLE_API, ROLE_USER, Account
from useraccounts.domain.accounts import AccountService

# Low bcrypt cost keeps hashing fast in unit tests
TEST_BCRYPT_COST = 4


@pytest.fixture
def account() -> Account:
    """A stored, unverified standard account."""
    return Account(
        id=7,
        email="ann@example.com",
        first_name="Ann",
        password_hash="$2b$04$storedhashstoredhashstoredhashstoredhashstoredhash",
        api_token="a" * 64,
        roles=(ROLE_USER,),
    )


@pytest.fixture
def api_client_account() -> Account:
    """A stored account holding the API role."""
    return Account(
        id=1,
        email="client@example.com",
        first_name="Client",
        password_hash="$2b$04$clienthashclienthashclienthashclienthashclienthash",
        api_token="c" * 64,
        roles=(ROLE_USER, ROLE_API),
        is_verified=True,
    )


@pytest.fixture
def repo() -> Mock:
    return Mock()


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def verifier() -> Mock:
    return Mock()


@pytest.fixture
def service(repo: Mock, notifier: Mock, verifier: Mock) -> AccountService:
    """AccountService wired to mocked ports."""
    return AccountService(
        repository=repo,
        notifier=notifier,
        verifier=verifier,
        bcrypt_cost=TEST_BCRYPT_COST,
    )


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """
    Connection pool against the configured PostgreSQL database.

    Tests depending on it are skipped when the database is unreachable.
    Migrations are applied once per session.
    """
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=10, open=False)
    try:
        pool.open(wait=True, timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")

    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean accounts table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield
