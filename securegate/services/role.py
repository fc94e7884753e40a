"""
Role registry.

Manages roles and their many-to-many association with permissions.
Every mutation validates existence and association state up front so
that double-assignments and stale ids fail loudly instead of being
silently ignored.

Usage:
    service = RoleService(db)
    editor = await service.create_role("editor")
    await service.update_permissions_to_roles(editor.id, [publish.id])
"""

from typing import Literal, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.config import settings
from securegate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from securegate.models.base import EntityStatus
from securegate.models.rbac import Permission, Role
from securegate.repositories.base import conflict_on_duplicate
from securegate.repositories.rbac import (
    PermissionRepository,
    RoleRepository,
    UserRoleRepository,
)
from securegate.utils.names import validate_name

logger = structlog.get_logger()

AssignMode = Literal["confirm", "additive"]


def _unique_ids(ids: Sequence[int]) -> list[int]:
    return list(dict.fromkeys(ids))


class RoleService:
    """
    Role registry.

    Args:
        db: Session the registry reads and writes through
        atomic_batches: Connect a permission batch in one flush; when off,
            each id is committed on its own (defaults to ``RBAC_ATOMIC_BATCHES``)
        assign_mode: Validation policy for ``assign_permissions_to_role``
            (defaults to ``RBAC_ASSIGN_MODE``)
    """

    def __init__(
        self,
        db: AsyncSession,
        atomic_batches: bool | None = None,
        assign_mode: AssignMode | None = None,
    ):
        self.db = db
        self.roles = RoleRepository(db)
        self.permissions = PermissionRepository(db)
        self.bindings = UserRoleRepository(db)
        self.atomic_batches = (
            settings.rbac.atomic_batches if atomic_batches is None else atomic_batches
        )
        self.assign_mode: AssignMode = assign_mode or settings.rbac.assign_mode

    # ============================================================
    # ROLE CRUD
    # ============================================================

    async def list_roles(self) -> list[Role]:
        """Active roles in store order."""
        return await self.roles.find_many()

    async def list_deleted_roles(self) -> list[Role]:
        return await self.roles.find_many(deleted=True)

    async def get_role_by_id(self, role_id: int) -> Role:
        """Active role with its permission associations loaded."""
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError(f"Role {role_id} not found")
        return role

    async def create_role(self, name: str) -> Role:
        """
        Create a role.

        Raises:
            BadRequestError: numeric or blank name
            ConflictError: the name is taken by an active role, or by a
                soft-deleted one that has to be restored instead
        """
        name = validate_name(name, "Role")

        existing = await self.roles.get_by_name(name)
        if existing is not None:
            if existing.status is EntityStatus.ACTIVE:
                raise ConflictError(f"Role {name} already exists")
            raise ConflictError(
                f"Role {name} exists but is deactivated, restore it instead"
            )

        async with conflict_on_duplicate(self.db, f"Role {name} already exists"):
            role = await self.roles.create(name=name)
        logger.info("role.created", role_id=role.id, name=name)
        return role

    async def update_role(self, role_id: int, name: str) -> Role:
        """
        Rename a role.

        Raises:
            BadRequestError: numeric name, or the name is unchanged
            ConflictError: another role (active or deactivated) has the name
            NotFoundError: no active role with this id
        """
        name = validate_name(name, "Role")
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError(f"Role {role_id} does not exist")

        if role.name == name:
            raise BadRequestError(f"Role {name} can not be same as old name")

        other = await self.roles.get_by_name(name)
        if other is not None and other.id != role.id:
            raise ConflictError(f"Role {name} already exists")

        async with conflict_on_duplicate(self.db, f"Role {name} already exists"):
            role = await self.roles.update(role, name=name)
        logger.info("role.updated", role_id=role.id, name=name)
        return role

    async def _get_any(self, role_id: int) -> Role:
        role = await self.roles.get_by_id(role_id, deleted=None)
        if not role:
            raise NotFoundError(f"Role {role_id} not found")
        return role

    async def deactivate_role(self, role_id: int) -> Role:
        role = await self._get_any(role_id)
        if role.status is EntityStatus.DELETED:
            raise BadRequestError(f"Role {role_id} already deactivated")

        role = await self.roles.soft_delete(role)
        logger.info("role.deactivated", role_id=role_id)
        return role

    async def undelete_role(self, role_id: int) -> Role:
        role = await self._get_any(role_id)
        if role.status is EntityStatus.ACTIVE:
            raise BadRequestError(f"Role {role_id} is not deactivated")

        role = await self.roles.restore(role)
        logger.info("role.restored", role_id=role_id)
        return role

    async def delete_role(self, role_id: int) -> None:
        """Physically remove a role with its bindings and permission links."""
        role = await self._get_any(role_id)

        revoked = await self.bindings.delete_for_role(role.id)
        await self.roles.delete(role)
        logger.info("role.deleted", role_id=role_id, removed_bindings=revoked)

    # ============================================================
    # ROLE <-> PERMISSION ASSOCIATIONS
    # ============================================================

    async def _get_active_role(self, role_id: int) -> Role:
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError(f"Role {role_id} does not exist")
        return role

    async def _get_active_permissions(self, permission_ids: Sequence[int]) -> list[Permission]:
        """Load every id or fail on the first missing one (in request order)."""
        found = {p.id: p for p in await self.permissions.get_by_ids(list(permission_ids))}
        for permission_id in permission_ids:
            if permission_id not in found:
                raise NotFoundError(f"Permission {permission_id} not found")
        return [found[pid] for pid in permission_ids]

    def _require_ids(self, permission_ids: Sequence[int]) -> list[int]:
        if not permission_ids:
            raise BadRequestError("At least one permission id is required")
        return _unique_ids(permission_ids)

    async def _connect(self, role: Role, permissions: list[Permission]) -> Role:
        message = f"Role {role.name} already has one of these permissions"
        async with conflict_on_duplicate(self.db, message):
            return await self.roles.connect_permissions(
                role, permissions, atomic=self.atomic_batches
            )

    async def assign_permissions_to_role(
        self,
        role_id: int,
        permission_ids: Sequence[int],
    ) -> Role:
        """
        Assign permissions to a role.

        In ``confirm`` mode every id must already be associated with the
        role; the call re-confirms the association and adds nothing new.
        In ``additive`` mode every id must not be associated yet.
        Validation covers the whole batch before anything is connected.
        """
        permission_ids = self._require_ids(permission_ids)
        role = await self._get_active_role(role_id)
        permissions = await self._get_active_permissions(permission_ids)

        for permission in permissions:
            associated = role.has_permission_id(permission.id)
            if self.assign_mode == "confirm" and not associated:
                raise BadRequestError(
                    f"Permission {permission.id} not associated with Role {role.name}"
                )
            if self.assign_mode == "additive" and associated:
                raise ConflictError(
                    f"Permission {permission.id} already associated with Role {role.name}"
                )

        role = await self._connect(role, permissions)
        logger.info(
            "role.permissions_assigned",
            role_id=role.id,
            permission_ids=permission_ids,
            mode=self.assign_mode,
        )
        return role

    async def remove_permissions_from_role(
        self,
        role_id: int,
        permission_ids: Sequence[int],
    ) -> Role:
        """Detach permissions from a role; every id must currently be associated."""
        permission_ids = self._require_ids(permission_ids)
        role = await self._get_active_role(role_id)
        permissions = await self._get_active_permissions(permission_ids)

        for permission in permissions:
            if not role.has_permission_id(permission.id):
                raise BadRequestError(
                    f"Permission {permission.id} not associated with Role {role.name}"
                )

        role = await self.roles.disconnect_permissions(role, permissions)
        logger.info("role.permissions_removed", role_id=role.id, permission_ids=permission_ids)
        return role

    async def update_permissions_to_roles(
        self,
        role_id: int,
        permission_ids: Sequence[int],
    ) -> Role:
        """Connect new permissions to a role; none of them may be associated yet."""
        if not role_id or not permission_ids:
            raise BadRequestError("Invalid role ID or permissions")
        permission_ids = _unique_ids(permission_ids)

        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError("Role does not exist")

        found = {p.id: p for p in await self.permissions.get_by_ids(permission_ids)}
        for permission_id in permission_ids:
            if permission_id not in found:
                raise NotFoundError(f"Permission {permission_id} does not exist")

        for permission_id in permission_ids:
            if role.has_permission_id(permission_id):
                raise ConflictError(f"Permission {permission_id} already exists on Role {role.name}")

        permissions = [found[pid] for pid in permission_ids]
        role = await self._connect(role, permissions)
        logger.info("role.permissions_updated", role_id=role.id, permission_ids=permission_ids)
        return role
