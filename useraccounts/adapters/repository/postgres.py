"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Email uniqueness is enforced by the accounts_email_key constraint, not by
application checks:

1. add() uses INSERT ... ON CONFLICT (email) DO NOTHING, so exactly one of
   several concurrent registrations for the same email stores a row.
2. promote_pending_email() turns a unique violation (an email promotion
   racing another account) into EmailAlreadyRegistered.

Every write sets only the columns it owns, so a request acting on a stale
read cannot revert a concurrent token rotation or email promotion.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from psycopg import errors
from psycopg_pool import ConnectionPool

from useraccounts.domain.account import CONFIRMED_EMAIL_MARKER, Account
from useraccounts.domain.exceptions import EmailAlreadyRegistered

logger = logging.getLogger(__name__)

_COLUMNS = "id, email, pending_email, first_name, password_hash, roles, is_verified, api_token"


def _row_to_account(row: tuple) -> Account:
    return Account(
        id=row[0],
        email=row[1],
        pending_email=row[2],
        first_name=row[3],
        password_hash=row[4],
        roles=tuple(row[5]),
        is_verified=row[6],
        api_token=row[7],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def add(self, account: Account) -> Account | None:
        """
        Insert a new account unless its email is already registered.

        Returns:
            The stored account with its generated id, or None on email conflict
        """
        sql = """
            INSERT INTO accounts (email, pending_email, first_name, password_hash, roles, is_verified, api_token)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING id
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql,
                (
                    account.email,
                    account.pending_email,
                    account.first_name,
                    account.password_hash,
                    list(account.roles),
                    account.is_verified,
                    account.api_token,
                ),
            )
            row = cursor.fetchone()
            conn.commit()

        if row is None:
            return None
        return replace(account, id=row[0])

    def get_by_id(self, account_id: int) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE id = %s", account_id)

    def get_by_email(self, email: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE email = %s", email)

    def get_by_api_token(self, api_token: str) -> Account | None:
        return self._fetch_one(f"SELECT {_COLUMNS} FROM accounts WHERE api_token = %s", api_token)

    def update_fields(
        self,
        account_id: int,
        *,
        first_name: str | None = None,
        password_hash: str | None = None,
        pending_email: str | None = None,
    ) -> bool:
        """
        Set only the given profile columns.

        Returns:
            True if the row exists and was updated
        """
        changes = {
            "first_name": first_name,
            "password_hash": password_hash,
            "pending_email": pending_email,
        }
        assignments = [(column, value) for column, value in changes.items() if value is not None]
        if not assignments:
            return self.get_by_id(account_id) is not None

        # Column names come from the fixed mapping above, never from input
        set_clause = ", ".join(f"{column} = %s" for column, _ in assignments)
        sql = f"UPDATE accounts SET {set_clause}, updated_at = NOW() WHERE id = %s"
        params = [value for _, value in assignments] + [account_id]
        return self._execute_write(sql, params)

    def set_api_token(self, account_id: int, api_token: str) -> bool:
        sql = "UPDATE accounts SET api_token = %s, updated_at = NOW() WHERE id = %s"
        return self._execute_write(sql, (api_token, account_id))

    def mark_verified(self, account_id: int) -> bool:
        sql = """
            UPDATE accounts
            SET is_verified = TRUE, updated_at = NOW()
            WHERE id = %s AND is_verified = FALSE
        """
        return self._execute_write(sql, (account_id,))

    def promote_pending_email(self, account_id: int, pending_email: str) -> bool:
        """
        Promote the pending email if it is still the one that was confirmed.

        The WHERE clause on pending_email makes a concurrent PATCH that
        replaced the pending address win over a stale confirmation.

        Raises:
            EmailAlreadyRegistered: If another account owns the address
        """
        sql = """
            UPDATE accounts
            SET email = pending_email,
                pending_email = %s,
                updated_at = NOW()
            WHERE id = %s AND pending_email = %s
        """

        try:
            return self._execute_write(sql, (CONFIRMED_EMAIL_MARKER, account_id, pending_email))
        except errors.UniqueViolation:
            raise EmailAlreadyRegistered(pending_email) from None

    def delete(self, account_id: int) -> bool:
        return self._execute_write("DELETE FROM accounts WHERE id = %s", (account_id,))

    def _execute_write(self, sql: str, params: Sequence[object]) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, params)
            conn.commit()
            return cursor.rowcount == 1

    def _fetch_one(self, sql: str, value: object) -> Account | None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (value,))
            row = cursor.fetchone()
        if row is None:
            return None
        return _row_to_account(row)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: useraccounts/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
