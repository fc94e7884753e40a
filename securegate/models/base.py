"""
Base model classes and mixins.

- TimestampMixin: created_at, updated_at (always use)
- SoftDeleteMixin: deleted_at plus a derived ACTIVE/DELETED status
- IntegerIDMixin: auto-increment integer primary key
"""

import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from securegate.utils.timezone import utc_now


class Base(DeclarativeBase):
    """Base class for all models."""

    # Common type annotations - all datetimes are timezone-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class EntityStatus(str, enum.Enum):
    """Lifecycle state of a soft-deletable record."""

    ACTIVE = "active"
    DELETED = "deleted"


# ============================================================
# PRIMARY KEY MIXIN
# ============================================================

class IntegerIDMixin:
    """Auto-increment integer primary key."""

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )


# ============================================================
# TIMESTAMP MIXIN
# ============================================================

class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps.

    Values are produced in Python (UTC) so they are available on the
    instance right after a flush without another round-trip.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


# ============================================================
# SOFT DELETE MIXIN
# ============================================================

class SoftDeleteMixin:
    """
    Mixin for soft delete functionality.

    Instead of hard deleting, records are marked as deleted.
    Authorization queries must always filter ``deleted_at IS NULL``.

    Usage:
        record.mark_deleted()
        query.where(MyModel.deleted_at.is_(None))
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def status(self) -> EntityStatus:
        if self.deleted_at is None:
            return EntityStatus.ACTIVE
        return EntityStatus.DELETED

    def mark_deleted(self) -> None:
        self.deleted_at = utc_now()

    def mark_restored(self) -> None:
        self.deleted_at = None


class StandardMixin(IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    id + timestamps + soft delete.

    Every entity in this service (users, roles, permissions, bindings)
    follows the same ACTIVE <-> DELETED lifecycle.
    """
    pass
