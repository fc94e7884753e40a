"""
Pytest fixtures for testing.

Provides:
- Async database session on in-memory SQLite
- Test client with the session injected
- Factory fixtures for users, roles and permissions
- Auth header helpers
"""

import os

# Must be set before securegate is imported (settings are cached at import)
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("EMAIL_BACKEND", "memory")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "text")

from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from securegate.api.dependencies.database import get_db
from securegate.core.security import create_token, hash_password
from securegate.implementations.email import MemoryEmailBackend, get_email_backend
from securegate.main import app
from securegate.models.base import Base
from securegate.models.rbac import Permission, Role, UserRole
from securegate.models.user import User


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session, rolled back after each test."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database session override."""

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def outbox() -> MemoryEmailBackend:
    """The in-memory email backend, emptied before the test."""
    backend = get_email_backend()
    assert isinstance(backend, MemoryEmailBackend)
    backend.clear()
    return backend


# ============ Factory Fixtures ============


class UserFactory:
    """Factory for creating test users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        email: str | None = None,
        password: str = "testpassword123",
        id: int | None = None,
    ) -> User:
        email = email or f"test-{uuid4().hex[:8]}@example.com"
        user = User(id=id, email=email, password_hash=hash_password(password))
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user


class RBACFactory:
    """Factory for roles, permissions and bindings."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def permission(self, name: str) -> Permission:
        permission = Permission(name=name)
        self.db.add(permission)
        await self.db.commit()
        await self.db.refresh(permission)
        return permission

    async def role(self, name: str, permissions: list[Permission] | None = None) -> Role:
        role = Role(name=name, permissions=list(permissions or []))
        self.db.add(role)
        await self.db.commit()
        await self.db.refresh(role)
        return role

    async def bind(self, user: User, role: Role) -> UserRole:
        binding = UserRole(user_id=user.id, role_id=role.id)
        self.db.add(binding)
        await self.db.commit()
        await self.db.refresh(binding)
        return binding


@pytest_asyncio.fixture
async def user_factory(db: AsyncSession) -> UserFactory:
    return UserFactory(db)


@pytest_asyncio.fixture
async def rbac(db: AsyncSession) -> RBACFactory:
    return RBACFactory(db)


@pytest_asyncio.fixture
async def test_user(user_factory: UserFactory) -> User:
    """Create a standard test user (no roles)."""
    return await user_factory.create()


@pytest_asyncio.fixture
async def admin_user(user_factory: UserFactory, rbac: RBACFactory) -> User:
    """User holding the admin role, which grants the write permission."""
    user = await user_factory.create(email="admin@example.com")
    write = await rbac.permission("write")
    admin = await rbac.role("admin", [write])
    await rbac.bind(user, admin)
    return user


# ============ Auth Helpers ============


def get_auth_headers(user: User) -> dict[str, str]:
    """Bearer headers for any user."""
    return {"Authorization": f"Bearer {create_token(user.id)}"}


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    return get_auth_headers(test_user)


@pytest_asyncio.fixture
async def admin_auth_headers(admin_user: User) -> dict[str, str]:
    return get_auth_headers(admin_user)


@pytest.fixture
def headers_for():
    """Build bearer headers for an arbitrary user inside a test."""
    return get_auth_headers
