"""
Authentication routes.
"""

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from securegate.api.dependencies.auth import CurrentUser
from securegate.api.dependencies.services import get_auth_service
from securegate.core.exceptions import ForbiddenError
from securegate.schemas.auth import (
    CompletePasswordResetRequest,
    ForgotPasswordRequest,
    MessageResponse,
    RefreshTokenRequest,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from securegate.schemas.user import UserResponse
from securegate.services.auth import AuthService

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    user = await auth_service.signup(email=data.email, password=data.password)
    tokens = auth_service.create_tokens(user.id)
    return SignupResponse(
        user=UserResponse.model_validate(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    tokens = await auth_service.login(
        email=form_data.username,
        password=form_data.password,
    )
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Refresh access token."""
    tokens = await auth_service.refresh(data.refresh_token)
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get current user profile."""
    return UserResponse.model_validate(current_user)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    current_user: CurrentUser,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Change the signed-in user's password."""
    if data.user_id != current_user.id:
        raise ForbiddenError("You can only reset your own password")

    await auth_service.reset_password(
        user_id=data.user_id,
        old_password=data.old_password,
        new_password=data.new_password,
    )
    return MessageResponse(message="Password updated")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Send a reset link (same response whether or not the email exists)."""
    await auth_service.forgot_password(data.email)
    return MessageResponse(message="If the account exists, a reset link has been sent")


@router.post("/reset-password/confirm", response_model=MessageResponse)
async def complete_password_reset(
    data: CompletePasswordResetRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.complete_password_reset(data.token, data.new_password)
    return MessageResponse(message="Password updated")
