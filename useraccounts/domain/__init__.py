"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account entity and lifecycle service. It defines
its own port interfaces for infrastructure abstraction, keeping persistence,
mail delivery, and token signing behind adapters.
"""

from .account import (
    CONFIRMED_EMAIL_MARKER,
    ROLE_API,
    ROLE_USER,
    Account,
    AccountSummary,
    EmailState,
)
from .accounts import API_TOKEN_ROTATION_FLAG, AccountService
from .exceptions import (
    AccountError,
    EmailAlreadyRegistered,
    UnsupportedPrincipal,
    VerificationFailed,
)
from .ports import (
    AccountRepository,
    ConfirmResult,
    EmailSender,
    EmailVerifier,
    MailEvent,
    MailEventKind,
    NotificationDispatcher,
    SignedToken,
)

__all__ = [
    "API_TOKEN_ROTATION_FLAG",
    "CONFIRMED_EMAIL_MARKER",
    "ROLE_API",
    "ROLE_USER",
    "Account",
    "AccountError",
    "AccountRepository",
    "AccountService",
    "AccountSummary",
    "ConfirmResult",
    "EmailAlreadyRegistered",
    "EmailSender",
    "EmailState",
    "EmailVerifier",
    "MailEvent",
    "MailEventKind",
    "NotificationDispatcher",
    "SignedToken",
    "UnsupportedPrincipal",
    "VerificationFailed",
]
