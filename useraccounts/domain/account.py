"""
Account entity - immutable value with explicit transition functions.

Email-Change Confirmation
=========================

States:
- CONFIRMED: no address is waiting (pending_email unset or the "confirmed" marker)
- PENDING_CONFIRMATION: pending_email holds a new address awaiting its link

Transitions:
    CONFIRMED -> PENDING_CONFIRMATION   (with_pending_email)
    PENDING_CONFIRMATION -> CONFIRMED   (confirm_pending_email, after a valid link)

An invalid or expired link leaves the account in PENDING_CONFIRMATION.
Every transition returns a new Account; a no-op transition returns the
same instance so callers can detect it with an identity check.
"""

from dataclasses import dataclass, replace
from enum import Enum

ROLE_USER = "ROLE_USER"
ROLE_API = "ROLE_API"

# Stored in pending_email once a change has been promoted
CONFIRMED_EMAIL_MARKER = "confirmed"


class EmailState(str, Enum):
    """Confirmation state of an account's email address."""

    CONFIRMED = "CONFIRMED"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"


@dataclass(frozen=True)
class Account:
    """A registered user account."""

    email: str
    first_name: str
    password_hash: str
    api_token: str
    roles: tuple[str, ...] = (ROLE_USER,)
    is_verified: bool = False
    pending_email: str | None = None
    id: int | None = None

    @property
    def has_pending_email(self) -> bool:
        return self.pending_email is not None and self.pending_email != CONFIRMED_EMAIL_MARKER

    @property
    def email_state(self) -> EmailState:
        if self.has_pending_email:
            return EmailState.PENDING_CONFIRMATION
        return EmailState.CONFIRMED

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def with_pending_email(self, email: str) -> "Account":
        """
        Start an email change.

        Raises:
            ValueError: If the address equals the confirmed email
        """
        if email == self.email:
            raise ValueError("pending email must differ from the confirmed email")
        return replace(self, pending_email=email)

    def confirm_pending_email(self) -> "Account":
        """Promote the pending address into email; no-op when nothing is pending."""
        if not self.has_pending_email:
            return self
        return replace(self, email=self.pending_email, pending_email=CONFIRMED_EMAIL_MARKER)

    def mark_verified(self) -> "Account":
        """Record that the registration email was confirmed."""
        if self.is_verified:
            return self
        return replace(self, is_verified=True)

    def with_first_name(self, first_name: str) -> "Account":
        return replace(self, first_name=first_name)

    def with_password_hash(self, password_hash: str) -> "Account":
        return replace(self, password_hash=password_hash)

    def with_api_token(self, api_token: str) -> "Account":
        return replace(self, api_token=api_token)


@dataclass(frozen=True)
class AccountSummary:
    """Public projection of an account: id, display name, and email."""

    id: int
    name: str
    email: str

    @classmethod
    def from_account(cls, account: Account, email: str | None = None) -> "AccountSummary":
        return cls(id=account.id, name=account.first_name, email=email or account.email)  # type: ignore[arg-type]
