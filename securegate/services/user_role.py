"""
User-role binding manager.

A binding is one ``UserRole`` row per (user, role). Revoking soft-deletes
the row and reassigning restores it, so a user never holds two bindings
to the same role.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from securegate.models.base import EntityStatus
from securegate.models.rbac import Role, UserRole
from securegate.models.user import User
from securegate.repositories.base import conflict_on_duplicate
from securegate.repositories.rbac import RoleRepository, UserRoleRepository
from securegate.repositories.user import UserRepository

logger = structlog.get_logger()

ALREADY_HAS_ROLE = "User already has this role"


class UserRoleService:
    """Assign, revoke and restore roles of users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.bindings = UserRoleRepository(db)

    async def _get_user(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def _get_role(self, role_id: int) -> Role:
        role = await self.roles.get_by_id(role_id)
        if not role:
            raise NotFoundError(f"Role {role_id} not found")
        return role

    async def _reclaim(self, binding: UserRole) -> None:
        if not await self.bindings.restore_if_revoked(binding):
            raise ConflictError(ALREADY_HAS_ROLE)

    async def assign_role_to_user(self, user_id: int, role_id: int) -> UserRole:
        """
        Grant a role to a user.

        A previously revoked binding is restored instead of duplicated.

        Raises:
            NotFoundError: user or role missing or deactivated
            BadRequestError: the user already holds the role
        """
        user = await self._get_user(user_id)
        role = await self._get_role(role_id)

        binding = await self.bindings.get_binding(user.id, role.id, deleted=None)
        if binding is None:
            async with conflict_on_duplicate(self.db, ALREADY_HAS_ROLE):
                binding = await self.bindings.create(user_id=user.id, role_id=role.id)
        elif binding.status is EntityStatus.ACTIVE:
            raise BadRequestError(ALREADY_HAS_ROLE)
        else:
            await self._reclaim(binding)

        logger.info("user_role.assigned", user_id=user.id, role_id=role.id)
        return binding

    async def revoke_role_of_user(self, user_id: int, role_id: int) -> UserRole:
        """
        Revoke a role (soft-delete the binding).

        Raises:
            NotFoundError: user missing, or no active binding to this role
        """
        user = await self._get_user(user_id)

        binding = await self.bindings.get_binding(user.id, role_id)
        if binding is None:
            raise NotFoundError(f"User {user.id} does not have role {role_id}")

        binding = await self.bindings.soft_delete(binding)
        logger.info("user_role.revoked", user_id=user.id, role_id=role_id)
        return binding

    async def restore_role_of_user(self, user_id: int, role_id: int) -> UserRole:
        """
        Restore a revoked binding.

        Raises:
            NotFoundError: user missing, or the user was never bound to the role
            BadRequestError: the binding is already active
        """
        user = await self._get_user(user_id)

        binding = await self.bindings.get_binding(user.id, role_id, deleted=None)
        if binding is None:
            raise NotFoundError(f"User {user.id} was never assigned role {role_id}")
        if binding.status is EntityStatus.ACTIVE:
            raise BadRequestError(ALREADY_HAS_ROLE)

        await self._reclaim(binding)
        logger.info("user_role.restored", user_id=user.id, role_id=role_id)
        return binding

    async def delete_role_binding(self, user_id: int, role_id: int) -> None:
        """Physically remove a binding, active or revoked."""
        user = await self._get_user(user_id)

        binding = await self.bindings.get_binding(user.id, role_id, deleted=None)
        if binding is None:
            raise NotFoundError(f"User {user.id} was never assigned role {role_id}")

        await self.bindings.delete(binding)
        logger.info("user_role.deleted", user_id=user.id, role_id=role_id)

    async def list_roles_of_user(self, user_id: int) -> list[Role]:
        """Active roles held through active bindings."""
        user = await self._get_user(user_id)
        return await self.roles.roles_for_user(user.id)
