"""
Authorization decision engine.

Answers "does user X satisfy requirement Y" by reading the user's active
bindings, roles and permissions fresh from the store on every call.

Semantics:
    has_roles       -> user holds ANY of the required role names
    has_permission  -> user holds ANY of the required permission names
    authorize       -> every non-empty kind of the requirement must pass

Usage:
    engine = AuthorizationEngine(db)
    requirement = AccessRequirement(roles=("admin",), permissions=("write",))
    await engine.require(user.id, requirement)
"""

from dataclasses import dataclass
from typing import Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.exceptions import NotFoundError, UnauthorizedError
from securegate.models.rbac import Permission
from securegate.repositories.rbac import RoleRepository
from securegate.repositories.user import UserRepository

logger = structlog.get_logger()

ACCESS_DENIED_MESSAGE = "You do not have permission to access this resource."


@dataclass(frozen=True)
class AccessRequirement:
    """
    Per-route access configuration.

    An empty ``roles`` or ``permissions`` tuple means that kind is not checked.
    A single name may be given as a plain string.
    """

    roles: tuple[str, ...] = ()
    permissions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for kind in ("roles", "permissions"):
            if isinstance(getattr(self, kind), str):
                object.__setattr__(self, kind, (getattr(self, kind),))


@dataclass
class AccessDecision:
    """Result of evaluating an ``AccessRequirement`` for one user."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls, reason: str | None = None) -> "AccessDecision":
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str = "Permission denied") -> "AccessDecision":
        return cls(allowed=False, reason=reason)


def _names(values: str | Iterable[str]) -> set[str]:
    if isinstance(values, str):
        values = (values,)
    return {v.strip().lower() for v in values}


class AuthorizationEngine:
    """Role and permission checks for a single user id."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)

    async def _ensure_user(self, user_id: int) -> None:
        if not await self.users.get_by_id(user_id):
            raise NotFoundError(f"User {user_id} not found")

    async def has_roles(self, user_id: int, required_roles: str | Iterable[str]) -> bool:
        """
        True when the user holds any of ``required_roles``.

        Deactivated roles and revoked bindings never count. A user with
        no bindings simply gets ``False``.

        Raises:
            NotFoundError: the user does not exist or is deactivated
        """
        await self._ensure_user(user_id)

        held = {role.name for role in await self.roles.roles_for_user(user_id)}
        if not held:
            return False
        return bool(held & _names(required_roles))

    async def get_permissions_for_user(self, user_id: int) -> list[Permission]:
        """
        Active permissions reachable through the user's active roles.

        A permission granted by several roles is listed once per role.

        Raises:
            NotFoundError: the user does not exist or is deactivated
        """
        await self._ensure_user(user_id)
        return await self.roles.permissions_for_user(user_id)

    async def has_permission(
        self, user_id: int, required_permissions: str | Iterable[str]
    ) -> bool:
        """True when the user holds any of ``required_permissions``."""
        held = {p.name for p in await self.get_permissions_for_user(user_id)}
        if not held:
            return False
        return bool(held & _names(required_permissions))

    async def authorize(self, user_id: int, requirement: AccessRequirement) -> AccessDecision:
        """
        Evaluate a requirement.

        Roles are checked first; permissions are only read if the role
        check passed or was skipped.
        """
        try:
            if requirement.roles and not await self.has_roles(user_id, requirement.roles):
                return AccessDecision.deny("Missing required role")
            if requirement.permissions and not await self.has_permission(
                user_id, requirement.permissions
            ):
                return AccessDecision.deny("Missing required permission")
        except NotFoundError:
            return AccessDecision.deny("Unknown user")

        return AccessDecision.allow()

    async def require(self, user_id: int, requirement: AccessRequirement) -> None:
        """
        Raise unless ``user_id`` satisfies ``requirement``.

        Raises:
            UnauthorizedError: any check failed, or the user is unknown
        """
        decision = await self.authorize(user_id, requirement)
        if not decision.allowed:
            logger.warning(
                "authorization.denied",
                user_id=user_id,
                roles=list(requirement.roles),
                permissions=list(requirement.permissions),
                reason=decision.reason,
            )
            raise UnauthorizedError(ACCESS_DENIED_MESSAGE)
