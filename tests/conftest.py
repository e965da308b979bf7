"""
Pytest fixtures - test DB, client, auth.
Isolated tests: each test gets a fresh in-memory SQLite database.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cityshare.core.security import create_access_token
from cityshare.db.base import Base
from cityshare.db.models import Listing, ListingImage, Profile, User
from cityshare.db.session import get_db
from cityshare.main import app

# One shared in-memory connection per test (StaticPool keeps it alive)
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as s:
        yield s


@pytest_asyncio.fixture
async def client(session: AsyncSession):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def _create_user(session: AsyncSession, email: str, **profile_fields) -> User:
    user = User(email=email, profile=Profile(**profile_fields))
    session.add(user)
    await session.flush()
    return user


@pytest_asyncio.fixture
async def test_user(session: AsyncSession) -> User:
    return await _create_user(
        session,
        "test@example.com",
        display_name="Test User",
        username="testuser",
        location="San Jose, CA",
        avatar_url="https://cdn.example.com/avatars/test.png",
    )


@pytest_asyncio.fixture
async def other_user(session: AsyncSession) -> User:
    return await _create_user(session, "other@example.com", display_name="Other User")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    token = create_access_token(test_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_headers(other_user: User) -> dict:
    token = create_access_token(other_user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_listing(session: AsyncSession, test_user: User):
    """Insert a listing row directly (bypasses the API). Returns the flushed model."""

    async def _make(**overrides) -> Listing:
        fields = {
            "owner_id": test_user.id,
            "item_name": "Desk Lamp",
            "kind": "donate",
            "status": "active",
            "usage_status": "available",
        }
        image_urls = overrides.pop("image_urls", [])
        fields.update(overrides)
        listing = Listing(
            **fields,
            images=[ListingImage(url=url, position=i) for i, url in enumerate(image_urls)],
        )
        session.add(listing)
        await session.flush()
        return listing

    return _make
