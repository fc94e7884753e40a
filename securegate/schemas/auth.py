"""
Authentication schemas.
"""

from pydantic import BaseModel, EmailStr, Field

from securegate.core.config import settings

from .user import UserResponse


class TokenResponse(BaseModel):
    """Token pair response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""
    refresh_token: str


class SignupRequest(BaseModel):
    """User signup request."""
    email: EmailStr
    password: str = Field(min_length=settings.auth.password_min_length, max_length=128)


class SignupResponse(BaseModel):
    """Signup response with user and tokens."""
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class ResetPasswordRequest(BaseModel):
    """Password change by the signed-in user."""
    user_id: int
    old_password: str
    new_password: str = Field(min_length=settings.auth.password_min_length, max_length=128)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class CompletePasswordResetRequest(BaseModel):
    token: str
    new_password: str = Field(min_length=settings.auth.password_min_length, max_length=128)


class MessageResponse(BaseModel):
    message: str
