"""Shared pytest fixtures and configuration."""

import os
import itertools
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before the app modules read them
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "text")

from app.clients.auth_client import AuthServiceClient
from app.core.config import Settings
from app.crud import agent_profile as crud_profile
from app.db.base_class import Base
from app.models import AgentProfile
from app.services.enrichment import EnrichmentAggregator
from tests.utils.helpers import AUTH_URL, JWT_SECRET, FakeAuthService, FakeRedis


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        JWT_SECRET=JWT_SECRET,
        AUTH_SERVICE_URL=AUTH_URL,
        AUTH_MAX_RETRIES=2,
        AUTH_RETRY_BACKOFF_SECONDS=0,
    )


# --- Database ---
@pytest_asyncio.fixture
async def engine():
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
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_profile(session_factory):
    """Insert a profile in its own session and return it."""

    async def _make_profile(user_id: str, status: str = "approved", **values) -> AgentProfile:
        async with session_factory() as session:
            profile = await crud_profile.create_profile(session, user_id, {"status": status, **values})
            await session.commit()
            await session.refresh(profile)
            return profile

    return _make_profile


# --- Collaborators ---
@pytest.fixture
def fake_auth():
    return FakeAuthService()


@pytest_asyncio.fixture
async def auth_client(settings, fake_auth):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_auth.handler))
    client = AuthServiceClient(settings, http_client=http_client)
    yield client
    await client.aclose()


@pytest.fixture
def enrichment(auth_client):
    return EnrichmentAggregator(auth_client)


@pytest.fixture
def storage():
    """Mock Cloudinary storage returning a distinct secure URL per upload."""
    counter = itertools.count(1)
    storage = MagicMock()

    async def _upload(content, folder, content_type="application/octet-stream",
                      filename: Optional[str] = None, resource_type="auto"):
        return f"https://res.cloudinary.com/test/{folder}/{next(counter)}-{filename or 'file'}"

    storage.upload = AsyncMock(side_effect=_upload)
    storage.delete = AsyncMock(return_value=True)
    return storage


@pytest.fixture
def video():
    """Mock YouTube uploader."""
    video = MagicMock()
    video.insert = AsyncMock(return_value="yt123")
    return video


@pytest.fixture
def fake_redis():
    return FakeRedis()


# --- HTTP app ---
@pytest_asyncio.fixture
async def api_client(settings, session_factory, auth_client, storage, video, fake_redis):
    """httpx client bound to the ASGI app with every outbound dependency replaced."""
    from app.main import app
    from app.core.config import get_settings
    from app.db.redis_client import get_redis
    from app.db.session import get_db
    from app.dependencies import get_auth_client, get_media_storage, get_video_platform

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield fake_redis

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_auth_client] = lambda: auth_client
    app.dependency_overrides[get_media_storage] = lambda: storage
    app.dependency_overrides[get_video_platform] = lambda: video

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
