from contextlib import asynccontextmanager

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from main import app
from app.core.config import Settings
from app.core.exceptions import NotificationFailedError, NotificationUnavailableError
from app.db.mongo import get_db
from app.services.notifier import WhatsAppNotifier, get_notifier, normalize_phone


class RecordingNotifier(WhatsAppNotifier):
    """Notifier double that records messages instead of calling UltraMsg."""

    def __init__(self, configured: bool = True, fail: bool = False):
        super().__init__(Settings(
            ULTRAMSG_INSTANCE="instance123" if configured else "",
            ULTRAMSG_TOKEN="token" if configured else ""
        ))
        self.fail = fail
        self.sent = []

    async def send(self, to, body):
        if not self.is_configured:
            raise NotificationUnavailableError("UltraMsg not configured")
        if self.fail:
            raise NotificationFailedError("Failed to send message: provider down")
        self.sent.append((normalize_phone(to), body))
        return {"sent": "true", "message": "ok"}


@asynccontextmanager
async def client_with(test_db, notifier):
    """API client wired to the given database and notifier double."""
    app.dependency_overrides[get_db] = lambda: test_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_db():
    """In-memory motor-compatible database, fresh for every test."""
    client = AsyncMongoMockClient()
    yield client[f"savings_test_{ObjectId()}"]


@pytest.fixture
def make_notifier():
    """Factory for notifier doubles, e.g. make_notifier(configured=False)."""
    return RecordingNotifier


@pytest.fixture
def notifier(make_notifier):
    return make_notifier()


@pytest.fixture
def client_for(test_db):
    """Factory for API clients using a specific notifier double."""
    def factory(notifier):
        return client_with(test_db, notifier)
    return factory


@pytest_asyncio.fixture
async def client(test_db, notifier):
    """API client wired to the test database and the recording notifier."""
    async with client_with(test_db, notifier) as ac:
        yield ac


@pytest_asyncio.fixture
async def friend(client):
    """Friend 'A' with a balance of 100."""
    response = await client.post(
        "/api/friends",
        json={"name": "A", "whatsapp": "+911234567890", "totalBalance": 100}
    )
    assert response.status_code == 200
    return response.json()
