"""
Request-scoped database session.

Every request runs as a single unit of work: services flush as they go
and the session commits once the handler returns. Any exception rolls
back everything the request staged.
"""

from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.models.database import async_session_factory

logger = structlog.get_logger()


async def get_db() -> AsyncIterator[AsyncSession]:
    async with async_session_factory() as session:
        try:
            yield session
        except Exception as exc:
            await session.rollback()
            logger.debug("db.rolled_back", error=type(exc).__name__)
            raise
        else:
            await session.commit()
