"""Authentication routes for registration, login and password changes."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from api.auth.dependencies import CurrentUser, get_current_user
from api.auth.jwt import issue_token
from api.auth.service import AuthService
from api.models.api_models import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from api.responses import ERROR_RESPONSES, SuccessResponse
from postboard.db.engine import get_session_dependency

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(session: Session = Depends(get_session_dependency)) -> AuthService:
    """Dependency to get AuthService with database session."""
    return AuthService(session)


def _auth_response(user) -> AuthResponse:
    return AuthResponse(
        token=issue_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse, responses=ERROR_RESPONSES)
def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange email and password for a session token.

    Wrong email and wrong password produce the same 400 response.
    """
    user = auth_service.authenticate(request.email, request.password)
    return _auth_response(user)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create a user and sign them in."""
    user = auth_service.register(
        username=request.username,
        email=request.email,
        password=request.password,
        role=request.role,
    )
    return _auth_response(user)


@router.get("/me", response_model=UserEnvelope, responses=ERROR_RESPONSES)
def me(current_user: CurrentUser = Depends(get_current_user)):
    return UserEnvelope(user=UserResponse.model_validate(current_user.user))


@router.put("/password", response_model=SuccessResponse, responses=ERROR_RESPONSES)
def change_password(
    request: PasswordChangeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.change_password(
        current_user.user, request.current_password, request.new_password
    )
    return SuccessResponse(message="Password updated")
