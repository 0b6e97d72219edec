"""Shared test fixtures for the ESG API test suite."""

import os

# Configure before any app module builds its engine or middleware
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")

import uuid  # noqa: E402
from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.auth.dependencies import get_current_user  # noqa: E402
from app.core.database import Base, get_db  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models.core import User  # noqa: E402
from app.schemas.auth import CurrentUser  # noqa: E402

# ── Sample data ───────────────────────────────────────────────────────────────

SAMPLE_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000003")
SAMPLE_PASSWORD = "password123"

SAMPLE_CURRENT_USER = CurrentUser(
    user_id=SAMPLE_USER_ID,
    username="testuser",
    email="test@example.com",
)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def sample_user(db: AsyncSession) -> User:
    user = User(
        id=SAMPLE_USER_ID,
        username="testuser",
        email="test@example.com",
        full_name="Test User",
        password_hash=hash_password(SAMPLE_PASSWORD),
    )
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def other_user(db: AsyncSession) -> User:
    user = User(
        id=OTHER_USER_ID,
        username="otheruser",
        email="other@example.com",
        full_name="Other User",
        password_hash=hash_password("another-password"),
    )
    db.add(user)
    await db.flush()
    return user


@pytest.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Unauthenticated client sharing the test session."""
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def authenticated_client(
    client: AsyncClient, sample_user: User
) -> AsyncGenerator[AsyncClient]:
    """Client acting as SAMPLE_CURRENT_USER without going through token checks."""
    app.dependency_overrides[get_current_user] = lambda: SAMPLE_CURRENT_USER
    yield client
    app.dependency_overrides.pop(get_current_user, None)
