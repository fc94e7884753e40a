"""
Role / permission schemas.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from securegate.models.base import EntityStatus


class PermissionCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class PermissionUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class PermissionResponse(BaseModel):
    """Permission response schema."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class RoleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class RoleUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class RoleSummary(BaseModel):
    """Role without its permissions."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class RoleResponse(BaseModel):
    """Role with its permission associations."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: EntityStatus
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
    permissions: list[PermissionResponse] = []


class PermissionIdsRequest(BaseModel):
    """Batch of permission ids for role association endpoints."""
    permission_ids: list[int] = Field(min_length=1)


class UserRoleRequest(BaseModel):
    role_id: int


class UserRoleResponse(BaseModel):
    """User-role binding."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    role_id: int
    status: EntityStatus
    created_at: datetime
    updated_at: datetime


class AccessCheckRequest(BaseModel):
    """Names to test with has-any semantics."""
    names: list[str] = Field(min_length=1)


class AccessCheckResponse(BaseModel):
    user_id: int
    allowed: bool
