"""
Async engine and session factory.

``DB_URL`` selects the driver: ``postgresql+asyncpg`` in deployments,
``sqlite+aiosqlite`` for local runs and tests.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from securegate.core.config import settings


def build_engine(url: str) -> AsyncEngine:
    options: dict = {"echo": settings.database.echo}
    if make_url(url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.pool_overflow,
            pool_timeout=settings.database.pool_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(url, **options)


engine = build_engine(settings.database.url)

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db() -> None:
    """Create any missing tables (migrations own the schema in production)."""
    from securegate.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
