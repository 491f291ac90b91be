"""
tests/conftest.py
Shared fixtures: in-memory SQLite database, in-process Redis stand-in,
an HTTP client bound to the app, and signed-in users.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from config.database import Base, get_db
from config.redis_client import get_redis
from main import app
from shared.models.models import User
from shared.utils.security import create_access_token


class FakeRedis:
    """Only the commands the JWT deny-list uses."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value

    async def exists(self, key: str) -> int:
        return 1 if key in self.store else 0

    async def ping(self) -> bool:
        return True


def auth_headers(user: User) -> dict:
    token, _ = create_access_token(str(user.id), user.phone)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def client(session_factory, fake_redis):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: fake_redis
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user(db: AsyncSession) -> User:
    member = User(
        phone="9826000001",
        email="ravi@example.com",
        full_name="Ravi Agrawal",
        city="Jabalpur",
        occupation="Trader",
        is_verified=True,
    )
    db.add(member)
    await db.commit()
    return member


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    admin = User(
        phone="9826000099",
        email="admin@example.com",
        full_name="Sabha Admin",
        city="Jabalpur",
        is_verified=True,
        is_admin=True,
    )
    db.add(admin)
    await db.commit()
    return admin
