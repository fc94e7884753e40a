"""
RBAC repositories - roles, permissions and user-role bindings.

The authorization read paths (``roles_for_user``, ``permissions_for_user``)
always filter out soft-deleted bindings, roles and permissions.
"""

from typing import Sequence

from sqlalchemy import insert, select, update

from securegate.models.rbac import Permission, Role, UserRole, role_permissions

from .base import SoftDeleteRepository


class PermissionRepository(SoftDeleteRepository[Permission]):
    model = Permission

    async def get_by_name(self, name: str, deleted: bool | None = False) -> Permission | None:
        return await self.find_first(deleted=deleted, name=name)


class RoleRepository(SoftDeleteRepository[Role]):
    model = Role

    async def get_by_name(self, name: str, deleted: bool | None = None) -> Role | None:
        """Role names are unique across active and deleted rows, so search both by default."""
        return await self.find_first(deleted=deleted, name=name)

    async def connect_permissions(
        self,
        role: Role,
        permissions: Sequence[Permission],
        atomic: bool = True,
    ) -> Role:
        """
        Attach permissions to a role.

        Already-attached permissions are skipped. With ``atomic`` the batch
        goes out in a single flush and stands or falls with the request.
        Otherwise every permission is inserted and committed on its own:
        a failure leaves the ones attached before it in place.
        """
        pending = [p for p in permissions if not role.has_permission_id(p.id)]
        if atomic:
            role.permissions.extend(pending)
            return await self.save(role)

        role_id = role.id
        for permission in pending:
            await self.db.execute(
                insert(role_permissions).values(role_id=role_id, permission_id=permission.id)
            )
            await self.db.commit()
        await self.db.refresh(role, attribute_names=["permissions"])
        return role

    async def disconnect_permissions(self, role: Role, permissions: Sequence[Permission]) -> Role:
        """Detach permissions from a role in one flush."""
        ids = {p.id for p in permissions}
        role.permissions = [p for p in role.permissions if p.id not in ids]
        return await self.save(role)

    async def detach_permission(self, permission: Permission) -> int:
        """Remove a permission from every role holding it. Returns the number of roles touched."""
        stmt = (
            select(Role)
            .join(role_permissions, role_permissions.c.role_id == Role.id)
            .where(role_permissions.c.permission_id == permission.id)
        )
        result = await self.db.execute(stmt)
        roles = list(result.scalars().all())
        for role in roles:
            role.permissions = [p for p in role.permissions if p.id != permission.id]
        await self.db.flush()
        return len(roles)

    async def roles_for_user(self, user_id: int) -> list[Role]:
        """Active roles held through active bindings."""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(
                UserRole.user_id == user_id,
                UserRole.deleted_at.is_(None),
                Role.deleted_at.is_(None),
            )
            .order_by(Role.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def permissions_for_user(self, user_id: int) -> list[Permission]:
        """
        Active permissions reachable through active roles and bindings.

        One entry per (role, permission) pair: a permission granted by two
        roles appears twice.
        """
        stmt = (
            select(Permission, Role.id)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(Role, Role.id == role_permissions.c.role_id)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(
                UserRole.user_id == user_id,
                UserRole.deleted_at.is_(None),
                Role.deleted_at.is_(None),
                Permission.deleted_at.is_(None),
            )
            .order_by(Role.id, Permission.id)
        )
        result = await self.db.execute(stmt)
        return [row[0] for row in result.all()]


class UserRoleRepository(SoftDeleteRepository[UserRole]):
    model = UserRole

    async def get_binding(
        self,
        user_id: int,
        role_id: int,
        deleted: bool | None = False,
    ) -> UserRole | None:
        return await self.find_first(deleted=deleted, user_id=user_id, role_id=role_id)

    async def restore_if_revoked(self, binding: UserRole) -> bool:
        """
        Clear the tombstone only while the row is still revoked in the store.

        Returns ``False`` when another transaction restored the binding first;
        ``binding`` is refreshed otherwise.
        """
        stmt = (
            update(UserRole)
            .where(UserRole.id == binding.id, UserRole.deleted_at.is_not(None))
            .values(deleted_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            return False
        await self.db.refresh(binding)
        return True

    async def delete_for_role(self, role_id: int) -> int:
        return await self.delete_many(role_id=role_id)

    async def delete_for_user(self, user_id: int) -> int:
        return await self.delete_many(user_id=user_id)
