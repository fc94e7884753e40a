"""
User management routes.
"""

from fastapi import APIRouter, Depends, status

from securegate.api.dependencies.auth import AdminUser
from securegate.api.dependencies.services import get_user_service
from securegate.schemas.rbac import RoleSummary
from securegate.schemas.user import (
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
    UserWithRolesResponse,
)
from securegate.services.user import UserService

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    """List active users (admin only)."""
    users = await user_service.list_users()
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users),
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.create_user(data.email, data.password)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserWithRolesResponse)
async def get_user(
    user_id: int,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    """Get user by ID with its active roles."""
    user, roles = await user_service.get_user_with_roles(user_id)
    return UserWithRolesResponse(
        **UserResponse.model_validate(user).model_dump(),
        roles=[RoleSummary.model_validate(r) for r in roles],
    )


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.update_user(user_id, password=data.password, email=data.email)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: int,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.deactivate_user(user_id)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reactivate", response_model=UserResponse)
async def reactivate_user(
    user_id: int,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.reactivate_user(user_id)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    _: AdminUser,
    user_service: UserService = Depends(get_user_service),
):
    """Delete user permanently (admin only)."""
    await user_service.delete_user(user_id)
