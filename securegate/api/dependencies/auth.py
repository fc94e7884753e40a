"""
Authentication and route-guard dependencies.

Usage:
    from securegate.api.dependencies.auth import CurrentUser, require_access

    @router.get("/me")
    async def handler(user: CurrentUser):
        ...

    ADMIN_WRITE = AccessRequirement(roles=("admin",), permissions=("write",))

    @router.post("/roles", dependencies=[Depends(require_access(ADMIN_WRITE))])
    async def create_role(...):
        ...
"""

from typing import Annotated, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from securegate.core.exceptions import UnauthorizedError
from securegate.models.user import User
from securegate.services.auth import AuthService
from securegate.services.authorization import AccessRequirement, AuthorizationEngine

from .services import get_auth_service, get_authorization_engine

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# Guard used by every management route
ADMIN_WRITE = AccessRequirement(roles=("admin",), permissions=("write",))


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Get current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: missing or invalid token, or inactive user
    """
    if not token:
        raise UnauthorizedError("Not authenticated")
    return await auth_service.resolve_user(token)


def require_access(requirement: AccessRequirement) -> Callable:
    """
    Dependency factory enforcing a per-route ``AccessRequirement``.

    Returns the authenticated user so handlers can use it directly.
    """

    async def check_access(
        current_user: User = Depends(get_current_user),
        engine: AuthorizationEngine = Depends(get_authorization_engine),
    ) -> User:
        await engine.require(current_user.id, requirement)
        return current_user

    return check_access


# Authenticated user (required)
CurrentUser = Annotated[User, Depends(get_current_user)]

# Authenticated user holding admin + write
AdminUser = Annotated[User, Depends(require_access(ADMIN_WRITE))]
