"""
User management routes.

REST endpoints under /api/user, gated on the API role:
- POST   /api/user       register a user
- GET    /api/user/{id}  fetch a user
- PATCH  /api/user/{id}  partially update a user
- DELETE /api/user/{id}  delete a user

A duplicate email is reported as 403, matching the established contract
of this API rather than the more conventional 409.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from useraccounts.api.dependencies import get_account_service, require_api_role
from useraccounts.api.models import (
    ErrorResponse,
    RegisterUserRequest,
    UpdateUserRequest,
    UserResponse,
)
from useraccounts.domain.account import Account
from useraccounts.domain.accounts import AccountService
from useraccounts.domain.exceptions import EmailAlreadyRegistered

router = APIRouter(tags=["users"], dependencies=[Depends(require_api_role)])

EMAIL_EXISTS_MESSAGE = "A user with this email already exists"
NOT_FOUND_MESSAGE = "No user exists with this id"

_auth_responses = {
    401: {"model": ErrorResponse, "description": "Missing or unknown API token"},
    403: {"model": ErrorResponse, "description": "API role required"},
}


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)


def _email_exists() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=EMAIL_EXISTS_MESSAGE)


def _to_response(account: Account) -> UserResponse:
    return UserResponse(user_id=account.id, user_name=account.first_name, user_email=account.email)


@router.post(
    "/user",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **_auth_responses,
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Create a user account. A confirmation link is emailed to the new address. "
    "Returns 403 if the email is already registered.",
)
async def register_user(
    request_data: RegisterUserRequest,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    """
    Register a new user.

    - **email**: Email address, unique across all users
    - **name**: Display name
    - **password**: Plaintext password, stored only as a hash
    """
    if service.email_exists(request_data.email):
        raise _email_exists()

    try:
        account = service.register(request_data.email, request_data.name, request_data.password)
    except EmailAlreadyRegistered:
        # Lost a race against a concurrent registration
        raise _email_exists() from None
    return _to_response(account)


@router.get(
    "/user/{account_id}",
    response_model=UserResponse,
    responses={**_auth_responses, 404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Get a user",
)
async def get_user(
    account_id: int,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    account = service.get_by_id(account_id)
    if account is None:
        raise _not_found()
    return _to_response(account)


@router.patch(
    "/user/{account_id}",
    response_model=UserResponse,
    responses={**_auth_responses, 404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Update a user",
    description="Apply any of email, name, password. A new email stays pending until its "
    "confirmation link is followed; the response reports the submitted address.",
)
async def update_user(
    account_id: int,
    request_data: UpdateUserRequest,
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    try:
        summary = service.update_profile(
            account_id,
            email=request_data.email,
            first_name=request_data.name,
            password=request_data.password,
        )
    except EmailAlreadyRegistered:
        raise _email_exists() from None

    if summary is None:
        raise _not_found()
    return UserResponse(user_id=summary.id, user_name=summary.name, user_email=summary.email)


@router.delete(
    "/user/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={**_auth_responses, 404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Delete a user",
)
async def delete_user(
    account_id: int,
    service: AccountService = Depends(get_account_service),
) -> Response:
    if not service.delete_account(account_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
