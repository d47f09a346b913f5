"""
Test configuration and fixtures.

- In-memory SQLite (aiosqlite) shared through a StaticPool, rebuilt per test
- `get_db` overridden so requests and fixtures see the same database
- httpx.AsyncClient wired to the ASGI app
- Admin / student users and an admin logged in through the API
"""

import os

# Set test environment variables before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-32chars-minimum"

from typing import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lms_sessions.client.api import AdminApiClient
from lms_sessions.core.database import get_db
from lms_sessions.main import app
from lms_sessions.models import Base, User, UserRole
from tests.factories import ADMIN_PASSWORD, bearer, create_user, login


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def engine():
    """Fresh in-memory database per test; StaticPool keeps a single connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and asserting on it directly."""
    async with session_factory() as session:
        yield session


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    AsyncClient against the app with `get_db` overridden.

    The override keeps the production commit/rollback behaviour but binds
    to the test engine.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
async def admin_user(db: AsyncSession) -> User:
    """Create an admin user."""
    return await create_user(
        db, name="Ada Admin", email="admin@example.com", password=ADMIN_PASSWORD, role=UserRole.ADMIN
    )


@pytest.fixture
async def student_user(db: AsyncSession) -> User:
    """Create a student user."""
    return await create_user(db, name="Amina Yusuf", email="amina@example.com")


@pytest.fixture
async def admin_login(client: httpx.AsyncClient, admin_user: User) -> dict:
    """Log the admin in through the API; this creates the admin's own session row."""
    return await login(client, admin_user.email, ADMIN_PASSWORD)


@pytest.fixture
def admin_headers(admin_login: dict) -> dict:
    return bearer(admin_login["accessToken"])


@pytest.fixture
def admin_api(client: httpx.AsyncClient, admin_login: dict) -> AdminApiClient:
    """AdminApiClient talking to the real app through the ASGI transport."""
    return AdminApiClient(token=admin_login["accessToken"], http=client)
