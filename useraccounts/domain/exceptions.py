"""
Domain exceptions - Semantic error types for the account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
A missing account is reported as an outcome, not an exception.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class EmailAlreadyRegistered(AccountError):
    """Email is already owned by another account."""

    pass


class UnsupportedPrincipal(AccountError):
    """Operation was invoked with a principal that is not an Account."""

    pass


class VerificationFailed(AccountError):
    """Confirmation token is invalid, expired, or bound to another account."""

    pass
