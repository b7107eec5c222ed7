"""
Self-service credential routes for the authenticated caller.

- POST /api/me/password   rotate the caller's password
- POST /api/me/api-token  rotate the caller's API token
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from useraccounts.api.dependencies import get_account_service, get_current_account
from useraccounts.api.models import (
    ApiTokenResponse,
    ChangePasswordRequest,
    ErrorResponse,
    RotateApiTokenRequest,
)
from useraccounts.domain.account import Account
from useraccounts.domain.accounts import AccountService

router = APIRouter(tags=["me"])


@router.post(
    "/me/password",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={401: {"model": ErrorResponse, "description": "Missing or unknown API token"}},
    summary="Change password",
)
async def change_password(
    request_data: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> Response:
    service.rotate_password(account, request_data.password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/me/api-token",
    response_model=ApiTokenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Rotation not confirmed"},
        401: {"model": ErrorResponse, "description": "Missing or unknown API token"},
    },
    summary="Rotate API token",
    description='Issue a new API token. The body must carry {"apiToken": "apiTokenSet"}; '
    "the previous token stops working immediately.",
)
async def rotate_api_token(
    request_data: RotateApiTokenRequest,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service),
) -> ApiTokenResponse:
    rotated = service.rotate_api_token(account, request_data.api_token)
    if rotated is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="API token rotation not confirmed",
        )
    return ApiTokenResponse(api_token=rotated.api_token)
