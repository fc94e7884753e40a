"""
Permission registry routes.
"""

from fastapi import APIRouter, Depends, status

from securegate.api.dependencies.auth import AdminUser
from securegate.api.dependencies.services import get_permission_service
from securegate.schemas.rbac import PermissionCreate, PermissionResponse, PermissionUpdate
from securegate.services.permission import PermissionService

router = APIRouter()


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    """List active permissions."""
    return await service.list_permissions()


@router.get("/deleted", response_model=list[PermissionResponse])
async def list_deleted_permissions(
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.list_deleted_permissions()


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.create_permission(data.name)


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: int,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.get_permission_by_id(permission_id)


@router.patch("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.update_permission(permission_id, data.name)


@router.post("/{permission_id}/deactivate", response_model=PermissionResponse)
async def deactivate_permission(
    permission_id: int,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.deactivate_permission(permission_id)


@router.post("/{permission_id}/reactivate", response_model=PermissionResponse)
async def reactivate_permission(
    permission_id: int,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    return await service.reactivate_permission(permission_id)


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: int,
    _: AdminUser,
    service: PermissionService = Depends(get_permission_service),
):
    """Delete a permission permanently (admin only)."""
    await service.delete_permission(permission_id)
