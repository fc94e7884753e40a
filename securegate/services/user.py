"""
User service.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.exceptions import BadRequestError, NotFoundError
from securegate.core.security import hash_password, verify_password
from securegate.models.base import EntityStatus
from securegate.models.rbac import Role
from securegate.models.user import User
from securegate.repositories.base import conflict_on_duplicate
from securegate.repositories.rbac import RoleRepository, UserRoleRepository
from securegate.repositories.user import UserRepository

logger = structlog.get_logger()


class UserService:
    """User management service."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.bindings = UserRoleRepository(db)

    async def list_users(self) -> list[User]:
        """Active users in store order."""
        return await self.users.find_many()

    async def find_user_by_email(self, email: str) -> User | None:
        return await self.users.get_by_email(email.strip().lower())

    async def create_user(self, email: str, password: str) -> User:
        """
        Create a user with a hashed password.

        Raises:
            BadRequestError: an active user already has this email
        """
        email = email.strip().lower()
        if await self.users.get_by_email(email):
            raise BadRequestError("Email already registered")

        async with conflict_on_duplicate(self.db, "Email already registered"):
            user = await self.users.create(email=email, password_hash=hash_password(password))
        logger.info("user.created", user_id=user.id)
        return user

    async def get_user_by_id(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def get_user_with_roles(self, user_id: int) -> tuple[User, list[Role]]:
        """Active user plus its active roles."""
        user = await self.get_user_by_id(user_id)
        return user, await self.roles.roles_for_user(user.id)

    async def update_user(
        self,
        user_id: int,
        password: str,
        email: str | None = None,
    ) -> User:
        """
        Change a user's password and optionally their email.

        Raises:
            NotFoundError: no active user with this id
            BadRequestError: the password is unchanged, or the email is taken
        """
        user = await self.get_user_by_id(user_id)

        if verify_password(password, user.password_hash):
            raise BadRequestError("New password can not be the same as the old one")

        data: dict = {"password_hash": hash_password(password)}
        if email is not None:
            email = email.strip().lower()
            other = await self.users.get_by_email(email)
            if other and other.id != user.id:
                raise BadRequestError("Email already registered")
            data["email"] = email

        async with conflict_on_duplicate(self.db, "Email already registered"):
            user = await self.users.update(user, **data)
        logger.info("user.updated", user_id=user.id)
        return user

    async def _get_any(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id, deleted=None)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def deactivate_user(self, user_id: int) -> User:
        user = await self._get_any(user_id)
        if user.status is EntityStatus.DELETED:
            raise BadRequestError(f"User {user_id} already deactivated")

        user = await self.users.soft_delete(user)
        logger.info("user.deactivated", user_id=user_id)
        return user

    async def reactivate_user(self, user_id: int) -> User:
        user = await self._get_any(user_id)
        if user.status is EntityStatus.ACTIVE:
            raise BadRequestError(f"User {user_id} is not deactivated")

        if await self.users.get_by_email(user.email):
            raise BadRequestError("Email already registered")

        async with conflict_on_duplicate(self.db, "Email already registered"):
            user = await self.users.restore(user)
        logger.info("user.reactivated", user_id=user_id)
        return user

    async def delete_user(self, user_id: int) -> None:
        """Physically remove a user and every binding it has."""
        user = await self._get_any(user_id)

        removed = await self.bindings.delete_for_user(user.id)
        await self.users.delete(user)
        logger.info("user.deleted", user_id=user_id, removed_bindings=removed)
