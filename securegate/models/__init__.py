"""
Database models.
"""

from .base import (
    Base,
    EntityStatus,
    IntegerIDMixin,
    TimestampMixin,
    SoftDeleteMixin,
    StandardMixin,
)
from .user import User
from .rbac import Permission, Role, UserRole, role_permissions

__all__ = [
    # Base
    "Base",
    "EntityStatus",
    # Mixins
    "IntegerIDMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
    "StandardMixin",
    # Models
    "User",
    "Role",
    "Permission",
    "UserRole",
    "role_permissions",
]
