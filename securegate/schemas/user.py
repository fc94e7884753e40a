"""
User schemas.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from securegate.core.config import settings
from securegate.models.base import EntityStatus

from .rbac import RoleSummary


class UserResponse(BaseModel):
    """User response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None = None


class UserWithRolesResponse(UserResponse):
    """User plus the roles it currently holds."""
    roles: list[RoleSummary] = []


class UserCreate(BaseModel):
    """Admin-side user creation."""
    email: EmailStr
    password: str = Field(min_length=settings.auth.password_min_length, max_length=128)


class UserUpdate(BaseModel):
    """User update schema (password is required, email optional)."""
    email: EmailStr | None = None
    password: str = Field(min_length=settings.auth.password_min_length, max_length=128)


class UserListResponse(BaseModel):
    """User list response."""
    users: list[UserResponse]
    total: int
