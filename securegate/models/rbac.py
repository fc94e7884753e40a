"""
RBAC Models - Roles, Permissions, and User-Role bindings.

Usage:
    editor = Role(name="editor")
    publish = Permission(name="publish")
    editor.permissions.append(publish)

    binding = UserRole(user_id=user.id, role_id=editor.id)

Every table carries ``deleted_at``; a soft-deleted role, permission or
binding must never contribute to an authorization decision.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, StandardMixin


# Many-to-many relationship between Role and Permission
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)


class Permission(Base, StandardMixin):
    """
    Named atomic capability (e.g. "write", "publish").

    Names are unique among active permissions only, so a deactivated
    permission's name can be reused.
    """

    __tablename__ = "permissions"
    __table_args__ = (
        Index(
            "uq_permissions_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Permission {self.name}>"


class Role(Base, StandardMixin):
    """
    Named bundle of permissions assignable to users.

    Role names are unique across active and soft-deleted rows: a deleted
    role must be restored rather than re-created.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        lazy="selectin",
        order_by="Permission.id",
    )

    def has_permission_id(self, permission_id: int) -> bool:
        return any(p.id == permission_id for p in self.permissions)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class UserRole(Base, StandardMixin):
    """
    Binding between a user and a role.

    A binding is revoked by soft-deleting it and re-granted by restoring
    the same row; the unique constraint keeps one row per (user, role)
    so concurrent duplicate grants fail at the store.
    """

    __tablename__ = "user_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} role={self.role_id}>"
