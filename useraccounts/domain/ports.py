"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

from .account import Account


class ConfirmResult(Enum):
    """
    Result of an email confirmation attempt.

    Used by AccountService.confirm_email() to report the outcome of a link.
    """

    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class MailEventKind(str, Enum):
    """Templated notifications the lifecycle emits."""

    REGISTRATION = "registration"
    UPDATE = "update"


@dataclass(frozen=True)
class MailEvent:
    """Notification request for one account."""

    account: Account
    kind: MailEventKind


@dataclass(frozen=True)
class SignedToken:
    """A signed confirmation token and its expiry."""

    token: str
    expires_at: datetime


class AccountRepository(Protocol):
    """
    Port interface for account persistence.

    Writes are targeted: each one sets only the columns it names, so
    concurrent writers touching different fields never undo each other.
    """

    def add(self, account: Account) -> Account | None:
        """
        Insert a new account.

        The store's uniqueness constraint on email is authoritative: a
        concurrent insert of the same email loses without raising.

        Args:
            account: Account without an id

        Returns:
            The stored account with its assigned id, or None if the
            email is already registered
        """
        ...

    def get_by_id(self, account_id: int) -> Account | None:
        """Fetch an account by id."""
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by its confirmed email."""
        ...

    def get_by_api_token(self, api_token: str) -> Account | None:
        """Fetch an account by its API token."""
        ...

    def update_fields(
        self,
        account_id: int,
        *,
        first_name: str | None = None,
        password_hash: str | None = None,
        pending_email: str | None = None,
    ) -> bool:
        """
        Set the given profile columns in one statement; None leaves a column untouched.

        Returns:
            True if the row exists and was updated
        """
        ...

    def set_api_token(self, account_id: int, api_token: str) -> bool:
        """Replace the API token. Returns False if the account no longer exists."""
        ...

    def mark_verified(self, account_id: int) -> bool:
        """
        Flag the registration email as confirmed.

        Returns:
            True if this call flipped the flag, False if it was already set
            or the account no longer exists
        """
        ...

    def promote_pending_email(self, account_id: int, pending_email: str) -> bool:
        """
        Move pending_email into email, provided it still equals pending_email.

        Returns:
            True if promoted, False if the pending address changed meanwhile

        Raises:
            EmailAlreadyRegistered: If another account owns the address
        """
        ...

    def delete(self, account_id: int) -> bool:
        """
        Permanently remove an account.

        Returns:
            True if a row was deleted, False if it did not exist
        """
        ...


class NotificationDispatcher(Protocol):
    """Port interface for fire-and-forget notification delivery."""

    def dispatch(self, event: MailEvent) -> None:
        """
        Queue a notification and return immediately.

        Delivery failures must never propagate to the caller.
        """
        ...


class EmailVerifier(Protocol):
    """Port interface for signing and validating confirmation tokens."""

    def generate_signature(
        self,
        account_id: int,
        email: str,
        purpose: MailEventKind,
        pending_email: str | None = None,
    ) -> SignedToken:
        """
        Sign a token for one confirmation flow.

        The token binds the account id, its confirmed email and the purpose;
        an UPDATE token also binds the pending address it is mailed to.
        """
        ...

    def validate_email_confirmation(
        self,
        token: str,
        account_id: int,
        email: str,
        purpose: MailEventKind,
        pending_email: str | None = None,
    ) -> None:
        """
        Validate a confirmation token against the account's current state.

        Raises:
            VerificationFailed: If the token is tampered, expired, issued for
                another purpose, or bound to other addresses
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_confirmation_link(self, email: str, subject: str, link: str) -> None:
        """
        Send a confirmation link to an email address.

        Args:
            email: Recipient email address
            subject: Email subject line
            link: Signed confirmation URL
        """
        ...
