"""
Role registry routes.
"""

from fastapi import APIRouter, Depends, status

from securegate.api.dependencies.auth import AdminUser
from securegate.api.dependencies.services import get_role_service
from securegate.schemas.rbac import (
    PermissionIdsRequest,
    RoleCreate,
    RoleResponse,
    RoleUpdate,
)
from securegate.services.role import RoleService

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    """List active roles with their permissions."""
    return await service.list_roles()


@router.get("/deleted", response_model=list[RoleResponse])
async def list_deleted_roles(
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.list_deleted_roles()


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.create_role(data.name)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.get_role_by_id(role_id)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.update_role(role_id, data.name)


@router.post("/{role_id}/deactivate", response_model=RoleResponse)
async def deactivate_role(
    role_id: int,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.deactivate_role(role_id)


@router.post("/{role_id}/restore", response_model=RoleResponse)
async def undelete_role(
    role_id: int,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.undelete_role(role_id)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: int,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    """Delete a role permanently, with its user bindings."""
    await service.delete_role(role_id)


# ============================================================
# PERMISSION ASSOCIATIONS
# ============================================================

@router.post("/{role_id}/permissions/assign", response_model=RoleResponse)
async def assign_permissions_to_role(
    role_id: int,
    data: PermissionIdsRequest,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.assign_permissions_to_role(role_id, data.permission_ids)


@router.post("/{role_id}/permissions/remove", response_model=RoleResponse)
async def remove_permissions_from_role(
    role_id: int,
    data: PermissionIdsRequest,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    return await service.remove_permissions_from_role(role_id, data.permission_ids)


@router.put("/{role_id}/permissions", response_model=RoleResponse)
async def update_permissions_to_role(
    role_id: int,
    data: PermissionIdsRequest,
    _: AdminUser,
    service: RoleService = Depends(get_role_service),
):
    """Connect new permissions to a role."""
    return await service.update_permissions_to_roles(role_id, data.permission_ids)
