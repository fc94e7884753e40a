"""
User-role binding and effective-access routes.

Mounted under ``/users/{user_id}``.
"""

from fastapi import APIRouter, Depends, status

from securegate.api.dependencies.auth import AdminUser
from securegate.api.dependencies.services import (
    get_authorization_engine,
    get_user_role_service,
)
from securegate.schemas.rbac import (
    AccessCheckRequest,
    AccessCheckResponse,
    PermissionResponse,
    RoleSummary,
    UserRoleRequest,
    UserRoleResponse,
)
from securegate.services.authorization import AuthorizationEngine
from securegate.services.user_role import UserRoleService

router = APIRouter()


@router.get("/{user_id}/roles", response_model=list[RoleSummary])
async def list_roles_of_user(
    user_id: int,
    _: AdminUser,
    service: UserRoleService = Depends(get_user_role_service),
):
    return await service.list_roles_of_user(user_id)


@router.post(
    "/{user_id}/roles",
    response_model=UserRoleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_role_to_user(
    user_id: int,
    data: UserRoleRequest,
    _: AdminUser,
    service: UserRoleService = Depends(get_user_role_service),
):
    return await service.assign_role_to_user(user_id, data.role_id)


@router.post("/{user_id}/roles/{role_id}/revoke", response_model=UserRoleResponse)
async def revoke_role_of_user(
    user_id: int,
    role_id: int,
    _: AdminUser,
    service: UserRoleService = Depends(get_user_role_service),
):
    return await service.revoke_role_of_user(user_id, role_id)


@router.post("/{user_id}/roles/{role_id}/restore", response_model=UserRoleResponse)
async def restore_role_of_user(
    user_id: int,
    role_id: int,
    _: AdminUser,
    service: UserRoleService = Depends(get_user_role_service),
):
    return await service.restore_role_of_user(user_id, role_id)


@router.delete("/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role_binding(
    user_id: int,
    role_id: int,
    _: AdminUser,
    service: UserRoleService = Depends(get_user_role_service),
):
    await service.delete_role_binding(user_id, role_id)


@router.post("/{user_id}/roles/check", response_model=AccessCheckResponse)
async def check_roles(
    user_id: int,
    data: AccessCheckRequest,
    _: AdminUser,
    engine: AuthorizationEngine = Depends(get_authorization_engine),
):
    """Does the user hold any of the given roles?"""
    allowed = await engine.has_roles(user_id, data.names)
    return AccessCheckResponse(user_id=user_id, allowed=allowed)


@router.get("/{user_id}/permissions", response_model=list[PermissionResponse])
async def get_permissions_for_user(
    user_id: int,
    _: AdminUser,
    engine: AuthorizationEngine = Depends(get_authorization_engine),
):
    """Effective permissions, one entry per granting role."""
    return await engine.get_permissions_for_user(user_id)


@router.post("/{user_id}/permissions/check", response_model=AccessCheckResponse)
async def check_permissions(
    user_id: int,
    data: AccessCheckRequest,
    _: AdminUser,
    engine: AuthorizationEngine = Depends(get_authorization_engine),
):
    """Does the user hold any of the given permissions?"""
    allowed = await engine.has_permission(user_id, data.names)
    return AccessCheckResponse(user_id=user_id, allowed=allowed)
