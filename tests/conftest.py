"""
Global test fixtures and configuration.
"""

import os
import tempfile

# Settings are read at import time, so the test environment is set first
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_FORMAT"] = "console"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="billboard-uploads-")
for _name in ("EMAIL_HOST", "EMAIL_USER", "EMAIL_PASSWORD", "TWILIO_ACCOUNT_SID"):
    os.environ.pop(_name, None)

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from billboard_api.api.dependencies import get_notifier
from billboard_api.core.database import get_db
from billboard_api.core.security import create_access_token, get_password_hash
from billboard_api.main import app
from billboard_api.models import (
    AdminFlag,
    Base,
    Billboard,
    BillboardStatus,
    Profile,
    User,
    UserRole,
)
from billboard_api.services.auth import AuthService
from billboard_api.services.notifications import NotificationService

DEFAULT_PASSWORD = "password123"


def future_day(days: int) -> datetime:
    """Midnight UTC, `days` days from today."""
    today = datetime.now(timezone.utc).replace(tzinfo=None, hour=0, minute=0, second=0, microsecond=0)
    return today + timedelta(days=days)


async def create_user(
    db: AsyncSession,
    email: str,
    role: UserRole = UserRole.ADVERTISER,
    is_admin: bool = False,
    password: str = DEFAULT_PASSWORD,
    phone: str = None,
) -> User:
    """Insert a user with profile and return it with relationships loaded."""
    user = User(
        email=email,
        phone=phone,
        hashed_password=get_password_hash(password),
        is_active=True,
        is_verified=True,
    )
    user.profile = Profile(first_name=email.split("@")[0].title(), last_name="Tester", role=role)
    if is_admin:
        user.admin = AdminFlag()
    db.add(user)
    await db.commit()
    return await AuthService(db).get_user(user.id)


async def create_billboard(
    db: AsyncSession,
    owner: User,
    name: str = "Sunset Boulevard Digital",
    price: str = "100.00",
    approved: bool = True,
    available: bool = True,
    location: str = "Los Angeles, CA",
    size: str = "14x48 ft",
) -> Billboard:
    billboard = Billboard(
        owner_id=owner.id,
        name=name,
        location=location,
        size=size,
        price_per_day=Decimal(price),
        description=f"{name} in {location}",
        is_available=available,
        is_approved=approved,
        status=BillboardStatus.APPROVED if approved else BillboardStatus.PENDING,
    )
    db.add(billboard)
    await db.commit()
    return billboard


def headers_for(user: User) -> Dict[str, str]:
    """Create authentication headers for a user."""
    return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}


@pytest_asyncio.fixture
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def notifier() -> AsyncMock:
    """Stand-in notification service recording every send."""
    fake = AsyncMock(spec=NotificationService)
    fake.is_email_configured = False
    fake.is_sms_configured = False
    fake.send_password_reset_email.return_value = False
    fake.send_password_reset_sms.return_value = False
    return fake


@pytest.fixture
def override_dependencies(test_db: AsyncSession, notifier: AsyncMock):
    """Override the database and notifier dependencies."""
    async def _get_test_db():
        yield test_db

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def owner(test_db: AsyncSession) -> User:
    return await create_user(test_db, "owner@example.com", UserRole.OWNER)


@pytest_asyncio.fixture
async def other_owner(test_db: AsyncSession) -> User:
    return await create_user(test_db, "rival@example.com", UserRole.OWNER)


@pytest_asyncio.fixture
async def advertiser(test_db: AsyncSession) -> User:
    return await create_user(test_db, "advertiser@example.com", UserRole.ADVERTISER)


@pytest_asyncio.fixture
async def other_advertiser(test_db: AsyncSession) -> User:
    return await create_user(test_db, "brand@example.com", UserRole.ADVERTISER)


@pytest_asyncio.fixture
async def admin_user(test_db: AsyncSession) -> User:
    return await create_user(test_db, "admin@example.com", UserRole.ADMIN, is_admin=True)


@pytest_asyncio.fixture
async def billboard(test_db: AsyncSession, owner: User) -> Billboard:
    """An approved, available billboard at 100 per day."""
    return await create_billboard(test_db, owner)


@pytest.fixture
def owner_headers(owner: User) -> Dict[str, str]:
    return headers_for(owner)


@pytest.fixture
def advertiser_headers(advertiser: User) -> Dict[str, str]:
    return headers_for(advertiser)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return headers_for(admin_user)


@pytest.fixture
def make_user(test_db: AsyncSession):
    """Factory for extra users inside a test."""
    async def _make(email: str, role: UserRole = UserRole.ADVERTISER, **kwargs) -> User:
        return await create_user(test_db, email, role, **kwargs)
    return _make


@pytest.fixture
def make_billboard(test_db: AsyncSession):
    """Factory for extra billboards inside a test."""
    async def _make(owner: User, **kwargs) -> Billboard:
        return await create_billboard(test_db, owner, **kwargs)
    return _make


@pytest.fixture
def auth_headers_for():
    return headers_for


@pytest.fixture
def days_ahead():
    return future_day
