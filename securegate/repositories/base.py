"""
Base repository with common CRUD operations.

Repositories are the only code that talks to the ORM session; services
receive records from them and never build queries themselves.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Generic, Type, TypeVar

import structlog
from sqlalchemy import Select, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.exceptions import ConflictError
from securegate.models.base import Base

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=Base)


@asynccontextmanager
async def conflict_on_duplicate(db: AsyncSession, message: str) -> AsyncIterator[None]:
    """
    Turn a constraint violation raised inside the block into ``ConflictError``.

    Covers the gap between a service's existence check and its write: a
    concurrent request can commit the same name or association first. The
    failed flush leaves the session unusable, so it is rolled back here.
    """
    try:
        yield
    except IntegrityError as exc:
        await db.rollback()
        logger.debug("db.constraint_conflict", message=message, error=str(exc.orig))
        raise ConflictError(message) from exc


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class RoleRepository(BaseRepository[Role]):
            model = Role

        repo = RoleRepository(db)
        role = await repo.get_by_id(role_id)
        roles = await repo.find_many(name="editor")
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self) -> Select:
        """Base query - override to add default filters (e.g., soft delete)."""
        return select(self.model)

    def _apply_filters(self, stmt: Select, filters: dict[str, Any]) -> Select:
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        return stmt

    async def get_by_id(self, id: int) -> ModelT | None:
        """Get entity by ID."""
        stmt = self._base_query().where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_first(self, **filters: Any) -> ModelT | None:
        """Get first entity matching equality filters."""
        stmt = self._apply_filters(self._base_query(), filters).order_by(self.model.id).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_many(self, **filters: Any) -> list[ModelT]:
        """Get all entities matching equality filters (store order: id)."""
        stmt = self._apply_filters(self._base_query(), filters).order_by(self.model.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **data: Any) -> ModelT:
        """Create new entity."""
        entity = self.model(**data)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def save(self, entity: ModelT) -> ModelT:
        """Flush pending changes on an already-loaded entity."""
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity: ModelT, **data: Any) -> ModelT:
        """Update fields on a loaded entity."""
        for field, value in data.items():
            if hasattr(entity, field):
                setattr(entity, field, value)
        return await self.save(entity)

    async def delete(self, entity: ModelT) -> None:
        """Delete entity (hard delete)."""
        await self.db.delete(entity)
        await self.db.flush()

    async def delete_many(self, **filters: Any) -> int:
        """Delete multiple entities matching filters."""
        stmt = delete(self.model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        result = await self.db.execute(stmt)
        return result.rowcount


class SoftDeleteRepository(BaseRepository[ModelT]):
    """
    Repository that filters out soft-deleted entities by default.

    Every read takes a ``deleted`` switch:
        deleted=False  -> active rows only (default)
        deleted=True   -> tombstoned rows only
        deleted=None   -> both
    """

    def _base_query(self, deleted: bool | None = False) -> Select:
        stmt = select(self.model)
        if deleted is False:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        elif deleted is True:
            stmt = stmt.where(self.model.deleted_at.is_not(None))
        return stmt

    async def get_by_id(self, id: int, deleted: bool | None = False) -> ModelT | None:
        stmt = self._base_query(deleted).where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: list[int], deleted: bool | None = False) -> list[ModelT]:
        """Get multiple entities by IDs."""
        if not ids:
            return []
        stmt = self._base_query(deleted).where(self.model.id.in_(ids)).order_by(self.model.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_first(self, deleted: bool | None = False, **filters: Any) -> ModelT | None:
        stmt = self._apply_filters(self._base_query(deleted), filters)
        stmt = stmt.order_by(self.model.id).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_many(self, deleted: bool | None = False, **filters: Any) -> list[ModelT]:
        stmt = self._apply_filters(self._base_query(deleted), filters).order_by(self.model.id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def soft_delete(self, entity: ModelT) -> ModelT:
        """Tombstone an entity."""
        entity.mark_deleted()
        return await self.save(entity)

    async def restore(self, entity: ModelT) -> ModelT:
        """Clear the tombstone on an entity."""
        entity.mark_restored()
        return await self.save(entity)
