"""
Repository pattern for data access.
"""

from securegate.repositories.base import BaseRepository, SoftDeleteRepository
from securegate.repositories.rbac import (
    PermissionRepository,
    RoleRepository,
    UserRoleRepository,
)
from securegate.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "SoftDeleteRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRoleRepository",
    "UserRepository",
]
