"""
Email confirmation link routes.

These are the targets of the links mailed on registration and on email
change. They carry no bearer token: the signed link is the credential.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from useraccounts.api.dependencies import get_account_service
from useraccounts.api.models import ConfirmEmailResponse, ErrorResponse
from useraccounts.domain.accounts import AccountService
from useraccounts.domain.ports import ConfirmResult

router = APIRouter(tags=["verification"])

_responses = {
    400: {"model": ErrorResponse, "description": "Link invalid or expired"},
    404: {"model": ErrorResponse, "description": "Unknown account"},
}


def _confirmation_response(
    result: ConfirmResult, account_id: int, service: AccountService
) -> ConfirmEmailResponse:
    """Translate a ConfirmResult into a response or HTTP error."""
    if result == ConfirmResult.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown account")
    if result == ConfirmResult.INVALID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Confirmation link is invalid or has expired",
        )
    if result == ConfirmResult.CONFLICT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="A user with this email already exists",
        )

    account = service.get_by_id(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown account")

    message = "Email confirmed" if result == ConfirmResult.CONFIRMED else "Email already confirmed"
    return ConfirmEmailResponse(message=message, email=account.email)


@router.get(
    "/verify/email",
    response_model=ConfirmEmailResponse,
    responses=_responses,
    summary="Confirm registration email",
)
async def confirm_registration(
    account_id: int = Query(..., alias="id"),
    token: str = Query(..., min_length=1),
    service: AccountService = Depends(get_account_service),
) -> ConfirmEmailResponse:
    result = service.confirm_registration(account_id, token)
    return _confirmation_response(result, account_id, service)


@router.get(
    "/verify/email/update",
    response_model=ConfirmEmailResponse,
    responses={**_responses, 403: {"model": ErrorResponse, "description": "Email taken meanwhile"}},
    summary="Confirm email change",
)
async def confirm_email_change(
    account_id: int = Query(..., alias="id"),
    token: str = Query(..., min_length=1),
    service: AccountService = Depends(get_account_service),
) -> ConfirmEmailResponse:
    result = service.confirm_email_change(account_id, token)
    return _confirmation_response(result, account_id, service)
