"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from useraccounts.adapters.mail.dispatcher import ThreadedMailDispatcher
from useraccounts.adapters.repository.postgres import run_migrations
from useraccounts.api.dependencies import get_email_sender, get_email_verifier
from useraccounts.api.endpoints import api_router
from useraccounts.config.settings import get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "users",
        "description": "User account management - register, fetch, update and delete users",
    },
    {
        "name": "me",
        "description": "Credential rotation for the authenticated caller",
    },
    {
        "name": "verification",
        "description": "Targets of the signed email confirmation links",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations on startup
    - Starts the notification dispatcher
    - Drains the dispatcher and closes the pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
    )

    logger.info("Running database migrations...")
    run_migrations(pool)

    notifier = ThreadedMailDispatcher(
        sender=get_email_sender(),
        verifier=get_email_verifier(),
        base_url=settings.public_base_url,
        max_workers=settings.mail_workers,
    )

    # Stored in app state for dependency injection
    app.state.pool = pool
    app.state.notifier = notifier

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    notifier.shutdown(wait=True)
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="useraccounts",
    description="User Account API - registration, profile updates and email confirmation",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}
