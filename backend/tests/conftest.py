"""
Catalog API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Unit tests use mocked sessions; endpoint tests run the real app against
       an in-memory SQLite database with fakes for the image store and the
       notification sink swapped in through `app.dependency_overrides`.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:    AsyncMock session (no database)
    ├── sample_image_bytes: tiny PNG payload
    ├── db_engine:          in-memory SQLite with every table created
    ├── image_store:        FakeImageStore, records uploads
    ├── notification_sink:  RecordingNotifier, records sent emails
    ├── test_client:        authenticated httpx AsyncClient bound to the app
    └── anon_client:        same app, no Authorization header
"""

import os

# Settings are read at import time; these must be set before any catalog import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["API_TOKEN"] = "test-token"
os.environ["MAX_FILE_SIZE"] = "2048"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import catalog.models  # noqa: F401
from catalog.database import Base, get_db_session
from catalog.exceptions import ImageUploadError, NotificationError
from catalog.services.image_store import ImageStore, get_image_store
from catalog.services.notification import EmailMessage, NotificationSink, get_notification_sink

API_TOKEN = "test-token"
AUTH_HEADERS = {"Authorization": f"Bearer {API_TOKEN}"}

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════

class FakeImageStore(ImageStore):
    """Image store that keeps uploads in a list and returns predictable URLs."""

    def __init__(self):
        self.uploads: List[dict] = []
        self.fail = False

    async def upload(self, content: bytes, filename: str, content_type: str) -> str:
        if self.fail:
            raise ImageUploadError(message="Image upload failed: store unavailable")
        self.uploads.append(
            {"content": content, "filename": filename, "content_type": content_type}
        )
        return f"https://images.test/products/{filename}"


class RecordingNotifier(NotificationSink):
    """Notification sink that records messages, or fails when asked to."""

    def __init__(self):
        self.sent: List[EmailMessage] = []
        self.fail = False

    async def send(self, message: EmailMessage) -> None:
        if self.fail:
            raise NotificationError(message="Email provider unreachable: connection refused")
        self.sent.append(message)


# ══════════════════════════════════════════════════════════════════════════
# Unit-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        result = MagicMock()
        result.scalar_one_or_none.return_value = product
        mock_db_session.execute.return_value = result
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_image_bytes():
    return PNG_BYTES


# ══════════════════════════════════════════════════════════════════════════
# Endpoint-Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite shared by every session of one test (StaticPool keeps a
    single connection alive). Foreign keys are switched on so ON DELETE SET
    NULL behaves as it does on PostgreSQL.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def image_store():
    return FakeImageStore()


@pytest.fixture
def notification_sink():
    return RecordingNotifier()


@pytest.fixture
def app(db_engine, image_store, notification_sink):
    """The application with database, image store and mail sink overridden."""
    from catalog.main import app as catalog_app

    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    catalog_app.dependency_overrides[get_db_session] = override_get_db_session
    catalog_app.dependency_overrides[get_image_store] = lambda: image_store
    catalog_app.dependency_overrides[get_notification_sink] = lambda: notification_sink

    yield catalog_app

    catalog_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Authenticated HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/products")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers=AUTH_HEADERS) as client:
        yield client


@pytest_asyncio.fixture
async def anon_client(app):
    """Client without credentials, for auth gate tests."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
