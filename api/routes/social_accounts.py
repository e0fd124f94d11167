"""Linked social account routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from api.auth.dependencies import CurrentUser, get_current_user
from api.models.api_models import (
    AccountCreateRequest,
    AccountEnvelope,
    AccountListResponse,
    AccountResponse,
    AccountUpdateRequest,
)
from api.responses import ERROR_RESPONSES, SuccessResponse
from api.services.account_service import AccountService
from postboard.db.engine import get_session_dependency

router = APIRouter(prefix="/social-accounts", tags=["social-accounts"])


def get_account_service(session: Session = Depends(get_session_dependency)) -> AccountService:
    return AccountService(session)


@router.get("", response_model=AccountListResponse, responses=ERROR_RESPONSES)
def list_accounts(
    current_user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    accounts = service.list_accounts(current_user.user_id)
    return AccountListResponse(accounts=[AccountResponse.from_account(a) for a in accounts])


@router.post(
    "",
    response_model=AccountEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def create_account(
    request: AccountCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    account = service.create_account(current_user.user_id, request.model_dump())
    return AccountEnvelope(account=AccountResponse.from_account(account))


@router.put("/{account_id}", response_model=AccountEnvelope, responses=ERROR_RESPONSES)
def update_account(
    account_id: UUID,
    request: AccountUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Rename an account or toggle ``isActive``."""
    account = service.update_account(
        account_id,
        current_user.user_id,
        is_active=request.is_active,
        account_name=request.account_name,
    )
    return AccountEnvelope(account=AccountResponse.from_account(account))


@router.delete("/{account_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES)
def delete_account(
    account_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
):
    """Unlink an account. Posts that targeted it keep their snapshot."""
    service.delete_account(account_id, current_user.user_id)
    return SuccessResponse(message="Account deleted successfully")
