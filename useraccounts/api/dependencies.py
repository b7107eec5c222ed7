"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes, and the
bearer-token authentication guards.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from psycopg_pool import ConnectionPool

from useraccounts.adapters.mail.console import ConsoleEmailSender
from useraccounts.adapters.repository.postgres import PostgresAccountRepository
from useraccounts.adapters.verification.jwt_signer import JwtEmailVerifier
from useraccounts.config.settings import get_settings
from useraccounts.domain.account import Account
from useraccounts.domain.accounts import AccountService
from useraccounts.domain.ports import NotificationDispatcher

# Module-level singleton - ConsoleEmailSender is stateless
_email_sender = ConsoleEmailSender()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_repository(request: Request) -> PostgresAccountRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAccountRepository(pool)


def get_email_sender() -> ConsoleEmailSender:
    """Get console email sender (singleton)."""
    return _email_sender


@lru_cache
def get_email_verifier() -> JwtEmailVerifier:
    """Get the confirmation token verifier configured from settings."""
    settings = get_settings()
    return JwtEmailVerifier(
        secret=settings.verification_secret,
        issuer=settings.verification_issuer,
        ttl_seconds=settings.verification_ttl_seconds,
    )


def get_notifier(request: Request) -> NotificationDispatcher:
    """Get the notification dispatcher started during app lifespan."""
    return request.app.state.notifier


def get_account_service(request: Request) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together the repository, notifier, and verifier for the domain service.
    """
    return AccountService(
        repository=get_repository(request),
        notifier=get_notifier(request),
        verifier=get_email_verifier(),
        bcrypt_cost=get_settings().bcrypt_cost,
    )


# Bearer API token security scheme for OpenAPI documentation.
# Missing header is reported by get_current_account as 401.
http_bearer = HTTPBearer(auto_error=False)


def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AccountService = Depends(get_account_service),
) -> Account:
    """
    Resolve the calling account from its API token.

    Raises:
        HTTPException: 401 if the header is missing or the token is unknown
    """
    account = None
    if credentials is not None:
        account = service.get_by_api_token(credentials.credentials)

    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return account


def require_api_role(account: Account = Depends(get_current_account)) -> Account:
    """
    Require the configured API role on the calling account.

    Raises:
        HTTPException: 403 if the account lacks the role
    """
    if not account.has_role(get_settings().api_role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return account
