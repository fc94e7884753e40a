"""
Service dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.services.auth import AuthService
from securegate.services.authorization import AuthorizationEngine
from securegate.services.permission import PermissionService
from securegate.services.role import RoleService
from securegate.services.user import UserService
from securegate.services.user_role import UserRoleService

from .database import get_db


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_authorization_engine(db: AsyncSession = Depends(get_db)) -> AuthorizationEngine:
    return AuthorizationEngine(db)


async def get_permission_service(db: AsyncSession = Depends(get_db)) -> PermissionService:
    return PermissionService(db)


async def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    return RoleService(db)


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Get user service instance."""
    return UserService(db)


async def get_user_role_service(db: AsyncSession = Depends(get_db)) -> UserRoleService:
    return UserRoleService(db)
