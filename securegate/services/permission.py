"""
Permission registry.

CRUD plus the soft-delete lifecycle for permissions:

    ACTIVE --deactivate--> DELETED --reactivate--> ACTIVE
    ACTIVE/DELETED --delete--> gone
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from securegate.models.base import EntityStatus
from securegate.models.rbac import Permission
from securegate.repositories.base import conflict_on_duplicate
from securegate.repositories.rbac import PermissionRepository, RoleRepository
from securegate.utils.names import validate_name

logger = structlog.get_logger()


class PermissionService:
    """Manage permission records."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.permissions = PermissionRepository(db)
        self.roles = RoleRepository(db)

    async def list_permissions(self) -> list[Permission]:
        """Active permissions in store order."""
        return await self.permissions.find_many()

    async def list_deleted_permissions(self) -> list[Permission]:
        return await self.permissions.find_many(deleted=True)

    async def create_permission(self, name: str) -> Permission:
        """
        Create a permission.

        Raises:
            BadRequestError: numeric or blank name
            ConflictError: an active permission already has this name
        """
        name = validate_name(name, "Permission")

        if await self.permissions.get_by_name(name):
            raise ConflictError("Permission already exists")

        async with conflict_on_duplicate(self.db, "Permission already exists"):
            permission = await self.permissions.create(name=name)
        logger.info("permission.created", permission_id=permission.id, name=name)
        return permission

    async def get_permission_by_id(self, permission_id: int) -> Permission:
        permission = await self.permissions.get_by_id(permission_id)
        if not permission:
            raise NotFoundError(f"Permission {permission_id} not found")
        return permission

    async def update_permission(self, permission_id: int, name: str) -> Permission:
        """
        Rename a permission.

        Raises:
            BadRequestError: numeric name, or the name is unchanged
            ConflictError: another active permission holds the name
            NotFoundError: no active permission with this id
        """
        name = validate_name(name, "Permission")
        permission = await self.get_permission_by_id(permission_id)

        if permission.name == name:
            raise BadRequestError(f"Permission {name} can not be the same as old name")

        other = await self.permissions.get_by_name(name)
        if other and other.id != permission.id:
            raise ConflictError("Permission already exists")

        async with conflict_on_duplicate(self.db, "Permission already exists"):
            permission = await self.permissions.update(permission, name=name)
        logger.info("permission.updated", permission_id=permission.id, name=name)
        return permission

    async def _get_any(self, permission_id: int) -> Permission:
        permission = await self.permissions.get_by_id(permission_id, deleted=None)
        if not permission:
            raise NotFoundError(f"Permission {permission_id} not found")
        return permission

    async def deactivate_permission(self, permission_id: int) -> Permission:
        permission = await self._get_any(permission_id)
        if permission.status is EntityStatus.DELETED:
            raise BadRequestError(f"Permission {permission_id} already deactivated")

        permission = await self.permissions.soft_delete(permission)
        logger.info("permission.deactivated", permission_id=permission_id)
        return permission

    async def reactivate_permission(self, permission_id: int) -> Permission:
        permission = await self._get_any(permission_id)
        if permission.status is EntityStatus.ACTIVE:
            raise BadRequestError(f"Permission {permission_id} is not deactivated")

        if await self.permissions.get_by_name(permission.name):
            raise ConflictError(
                f"An active permission named {permission.name} already exists"
            )

        message = f"An active permission named {permission.name} already exists"
        async with conflict_on_duplicate(self.db, message):
            permission = await self.permissions.restore(permission)
        logger.info("permission.reactivated", permission_id=permission_id)
        return permission

    async def delete_permission(self, permission_id: int) -> None:
        """Physically remove a permission and its role associations."""
        permission = await self._get_any(permission_id)

        detached = await self.roles.detach_permission(permission)
        await self.permissions.delete(permission)
        logger.info(
            "permission.deleted",
            permission_id=permission_id,
            detached_roles=detached,
        )
