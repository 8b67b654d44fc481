"""Shared fixtures: in-memory database, app wiring, and authenticated clients."""
import os

# Settings are read at import time, so point the app at a throwaway database first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from linkbox import models  # noqa: F401
from linkbox.config import settings
from linkbox.database import Base, configure_sqlite, get_db
from linkbox.main import app as fastapi_app

BASE_URL = "http://test"
PASSWORD = "correct-horse-battery"


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession]):
    """The FastAPI app with get_db routed to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def anon_client(app) -> AsyncGenerator[AsyncClient]:
    """Client without any credentials."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as client:
        yield client


async def register_and_login(app, email: str, name: str) -> str:
    """Register a user and return a session token for them."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url=BASE_URL) as client:
        response = await client.post(
            "/api/auth/register",
            json={"email": email, "password": PASSWORD, "name": name},
        )
        assert response.status_code == 201, response.text
        response = await client.post(
            "/api/auth/login",
            json={"email": email, "password": PASSWORD},
        )
        assert response.status_code == 200, response.text
        return response.json()["accessToken"]


def session_client(app, token: str) -> AsyncClient:
    """Client that sends the session cookie on every request."""
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url=BASE_URL,
        headers={"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"},
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Client logged in as the primary test user."""
    token = await register_and_login(app, "alice@example.com", "Alice")
    async with session_client(app, token) as client:
        yield client


@pytest.fixture
async def other_client(app) -> AsyncGenerator[AsyncClient]:
    """Client logged in as a second, unrelated user."""
    token = await register_and_login(app, "bob@example.com", "Bob")
    async with session_client(app, token) as client:
        yield client


@pytest.fixture
def create_api_key(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Create an API key for the primary user and return the create response."""

    async def _create(**fields) -> dict:
        response = await client.post("/api/api-keys", json={"name": "launcher", **fields})
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture
async def api_key_client(app, create_api_key) -> AsyncGenerator[AsyncClient]:
    """Client authenticated only by the primary user's API key."""
    created = await create_api_key()
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=BASE_URL,
        headers={settings.API_KEY_HEADER: created["key"]},
    ) as client:
        yield client
