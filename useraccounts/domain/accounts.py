"""
Account lifecycle domain service.

This module contains the core business logic for user accounts:
registration, lookups, profile updates, credential rotation, deletion,
and the signed-link email confirmation flow.

Email confirmation runs through a single operation, confirm_email(),
parameterized by the purpose the link was mailed for:

- REGISTRATION  Account.mark_verified, confirms a brand-new registration
- UPDATE        Account.confirm_pending_email, promotes a pending email change

The token binds the account id, its confirmed email and the purpose; an
email-change token also binds the pending address it was mailed to. A link
issued before a promotion, or for a pending address since replaced, no
longer validates.
"""

import logging
import secrets
from dataclasses import dataclass

import bcrypt

from .account import ROLE_USER, Account, AccountSummary
from .exceptions import EmailAlreadyRegistered, UnsupportedPrincipal, VerificationFailed
from .ports import (
    AccountRepository,
    ConfirmResult,
    EmailVerifier,
    MailEvent,
    MailEventKind,
    NotificationDispatcher,
)

logger = logging.getLogger(__name__)

# Submitted alongside an API token rotation request to confirm intent
API_TOKEN_ROTATION_FLAG = "apiTokenSet"

# Domain transition each confirmation purpose applies; a no-op means already confirmed
_TRANSITIONS = {
    MailEventKind.REGISTRATION: Account.mark_verified,
    MailEventKind.UPDATE: Account.confirm_pending_email,
}


@dataclass
class AccountService:
    """
    Domain service for the account lifecycle.

    Orchestrates email normalization, password hashing, token generation,
    persistence, and notification dispatch.
    """

    repository: AccountRepository
    notifier: NotificationDispatcher
    verifier: EmailVerifier
    bcrypt_cost: int = 10

    def register(
        self,
        email: str,
        first_name: str,
        password: str,
        *,
        is_verified: bool = False,
        role: str = ROLE_USER,
    ) -> Account:
        """
        Create a new account and send the registration confirmation link.

        Callers are expected to check email_exists() first; that check is
        advisory and the store's uniqueness constraint decides races.

        Args:
            email: User's email address (will be normalized)
            first_name: Display name
            password: User's password (will be hashed)
            is_verified: Whether the email is already known to be confirmed
            role: Initial role label

        Returns:
            The stored account

        Raises:
            EmailAlreadyRegistered: If email is already registered
        """
        normalized_email = self._normalize_email(email)
        account = Account(
            email=normalized_email,
            first_name=first_name,
            password_hash=self._hash_password(password),
            api_token=self._generate_api_token(),
            roles=(role,),
            is_verified=is_verified,
        )

        created = self.repository.add(account)
        if created is None:
            raise EmailAlreadyRegistered(normalized_email)

        logger.info("Registered account id=%s", created.id)
        self.notifier.dispatch(MailEvent(created, MailEventKind.REGISTRATION))
        return created

    def get_by_id(self, account_id: int) -> Account | None:
        return self.repository.get_by_id(account_id)

    def get_by_email(self, email: str) -> Account | None:
        return self.repository.get_by_email(self._normalize_email(email))

    def get_by_api_token(self, api_token: str) -> Account | None:
        return self.repository.get_by_api_token(api_token)

    def email_exists(self, email: str) -> bool:
        """Advisory check used to reject duplicate registrations early."""
        return self.get_by_email(email) is not None

    def update_profile(
        self,
        account_id: int,
        *,
        email: str | None = None,
        first_name: str | None = None,
        password: str | None = None,
    ) -> AccountSummary | None:
        """
        Apply optional profile changes.

        Each field is applied only when present, non-empty, and different
        from the current value. A new email is stored as pending and a
        confirmation link is sent to it; the confirmed email is unchanged
        until that link is followed. Only the changed columns are written.

        Returns:
            Summary carrying the pending email if one was just submitted,
            else the confirmed email; None if the account does not exist

        Raises:
            EmailAlreadyRegistered: If the new email belongs to another account
        """
        account = self.repository.get_by_id(account_id)
        if account is None:
            return None

        updated = account
        changes: dict[str, str] = {}

        if email:
            normalized_email = self._normalize_email(email)
            if normalized_email != account.email:
                if self.email_exists(normalized_email):
                    raise EmailAlreadyRegistered(normalized_email)
                updated = updated.with_pending_email(normalized_email)
                changes["pending_email"] = normalized_email

        if first_name and first_name != account.first_name:
            updated = updated.with_first_name(first_name)
            changes["first_name"] = first_name

        if password and not self._password_matches(password, account.password_hash):
            updated = updated.with_password_hash(self._hash_password(password))
            changes["password_hash"] = updated.password_hash

        if changes:
            if not self.repository.update_fields(account_id, **changes):
                return None

        if "pending_email" in changes:
            self.notifier.dispatch(MailEvent(updated, MailEventKind.UPDATE))
            return AccountSummary.from_account(updated, email=updated.pending_email)

        return AccountSummary.from_account(updated)

    def delete_account(self, account_id: int) -> bool:
        """
        Permanently delete an account.

        Returns:
            False if the account does not exist
        """
        deleted = self.repository.delete(account_id)
        if deleted:
            logger.info("Deleted account id=%s", account_id)
        return deleted

    def rotate_password(self, principal: object, new_password: str) -> Account:
        """
        Hash and persist a new password for the principal.

        Raises:
            UnsupportedPrincipal: If principal is not an Account
        """
        if not isinstance(principal, Account):
            raise UnsupportedPrincipal(
                f'Instances of "{type(principal).__name__}" are not supported.'
            )

        updated = principal.with_password_hash(self._hash_password(new_password))
        self.repository.update_fields(principal.id, password_hash=updated.password_hash)
        return updated

    def rotate_api_token(self, account: Account, confirmation: str | None) -> Account | None:
        """
        Issue a new API token when the rotation flag was submitted.

        Returns:
            The updated account, or None if rotation was not requested
        """
        if confirmation != API_TOKEN_ROTATION_FLAG:
            return None

        updated = account.with_api_token(self._generate_api_token())
        self.repository.set_api_token(account.id, updated.api_token)
        logger.info("Rotated API token for account id=%s", account.id)
        return updated

    def confirm_email(self, account_id: int, token: str, purpose: MailEventKind) -> ConfirmResult:
        """
        Validate a confirmation token and apply the transition for its purpose.

        REGISTRATION marks the account verified; UPDATE promotes the pending
        email. The token must have been issued for the same purpose, and an
        UPDATE token must be bound to the address currently pending.

        Args:
            account_id: Account the link was issued for
            token: Signed confirmation token from the link
            purpose: Which confirmation flow the link belongs to

        Returns:
            ConfirmResult describing the outcome; nothing is written unless
            the result is CONFIRMED
        """
        account = self.repository.get_by_id(account_id)
        if account is None:
            return ConfirmResult.NOT_FOUND

        pending_email = account.pending_email if account.has_pending_email else None
        try:
            self.verifier.validate_email_confirmation(
                token, account.id, account.email, purpose, pending_email
            )
        except VerificationFailed as e:
            logger.warning("Rejected confirmation link for account id=%s: %s", account_id, e)
            return ConfirmResult.INVALID

        transition = _TRANSITIONS[purpose]
        if transition(account) is account:
            return ConfirmResult.ALREADY_CONFIRMED

        if purpose == MailEventKind.REGISTRATION:
            if not self.repository.mark_verified(account.id):
                return ConfirmResult.ALREADY_CONFIRMED
        else:
            try:
                promoted = self.repository.promote_pending_email(account.id, pending_email)
            except EmailAlreadyRegistered:
                return ConfirmResult.CONFLICT
            if not promoted:
                logger.warning("Pending email changed before confirmation for account id=%s", account_id)
                return ConfirmResult.INVALID

        logger.info("Confirmed %s email for account id=%s", purpose.value, account_id)
        return ConfirmResult.CONFIRMED

    def confirm_registration(self, account_id: int, token: str) -> ConfirmResult:
        return self.confirm_email(account_id, token, MailEventKind.REGISTRATION)

    def confirm_email_change(self, account_id: int, token: str) -> ConfirmResult:
        return self.confirm_email(account_id, token, MailEventKind.UPDATE)

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()

    def _generate_api_token(self) -> str:
        """Generate an unpredictable 64-character hex API token."""
        return secrets.token_hex(32)

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()

    def _password_matches(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
