"""
Test fixtures for the referral backend tests.

Provides:
- In-memory SQLite database for isolated testing
- Async test client with proper session management
- Factories for users and access tokens
"""
# IMPORTANT: Set environment variables BEFORE any other imports
import os

TEST_JWT_SECRET = "test_jwt_secret"

os.environ["JWT_SECRET"] = TEST_JWT_SECRET
os.environ["ENVIRONMENT"] = "development"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from referral_backend.app.core.auth import TokenIssuer
from referral_backend.app.core.base import Base
from referral_backend.app.core.password_utils import hash_password
from referral_backend.app.core.settings import Settings
from referral_backend.app.main import create_app
from referral_backend.app.api.deps import get_session
from referral_backend.app.models.user import User
from referral_backend.app.models.referral import Referral  # noqa: F401 - register table
from referral_backend.app.repositories import SqlReferralStore, SqlUserStore
from referral_backend.app.services.referrals import ReferralService


TEST_PASSWORD = "secret123"

# Test database URL - SQLite in-memory
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Create test engine with StaticPool for in-memory SQLite
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

test_settings = Settings(
    _env_file=None,
    JWT_SECRET=TEST_JWT_SECRET,
    ENVIRONMENT="development",
    LOG_LEVEL="WARNING",
    RATE_LIMIT_ENABLED=False,
)

app = create_app(test_settings)


@pytest.fixture
def test_app():
    return app


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(test_settings)


@pytest.fixture(scope="function")
async def test_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    Creates all tables before and drops after each test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def service(test_session: AsyncSession, token_issuer: TokenIssuer) -> ReferralService:
    """ReferralService over the SQLAlchemy stores, sharing the test session."""
    return ReferralService(
        users=SqlUserStore(test_session),
        referrals=SqlReferralStore(test_session),
        tokens=token_issuer,
    )


@pytest.fixture
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.
    Overrides the database dependency.

    Note: We create a fresh session for each API call to avoid
    transaction conflicts with the test_session used for fixtures.
    """
    async def override_get_session():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Test Data Factories ---

async def make_user(session: AsyncSession, email: str, password: str = TEST_PASSWORD, **fields) -> User:
    user = User(email=email, password_hash=hash_password(password), **fields)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
def user_factory(test_session: AsyncSession):
    """Create users directly in the database: `await user_factory("bob@example.com")`."""
    async def _make(email: str, password: str = TEST_PASSWORD, **fields) -> User:
        return await make_user(test_session, email, password, **fields)
    return _make


@pytest.fixture
async def test_user(test_session: AsyncSession) -> User:
    """Create a test user without a referral code."""
    return await make_user(test_session, "alice@example.com")


@pytest.fixture
async def test_referrer(test_session: AsyncSession) -> User:
    """Create a user holding a referral code."""
    return await make_user(
        test_session,
        "referrer@example.com",
        referral_code="test-referral-code",
        referral_expiry=datetime.now(timezone.utc) + timedelta(days=7),
    )


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header_for(token_issuer: TokenIssuer):
    """Bearer header for any user id."""
    def _header(user_id: int) -> dict:
        return bearer(token_issuer.issue(user_id))
    return _header


@pytest.fixture
def auth_header(test_user: User, token_issuer: TokenIssuer) -> dict:
    """Generate auth header for test user."""
    return bearer(token_issuer.issue(test_user.id))
