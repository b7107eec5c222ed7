"""
API endpoint routers.

Combines the user management, self-service, and confirmation link routes.
"""

from fastapi import APIRouter

from useraccounts.api.endpoints import me, users, verification

api_router = APIRouter()
api_router.include_router(users.router, prefix="/api")
api_router.include_router(me.router, prefix="/api")
api_router.include_router(verification.router)

__all__ = ["api_router"]
