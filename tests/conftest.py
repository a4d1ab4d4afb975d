from datetime import datetime

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from fintrack.api.deps import get_gateway
from fintrack.core.auth import create_access_token
from fintrack.main import app
from fintrack.repositories.memory_gateway import MemoryGateway
from fintrack.services.record_store import RecordStore

TEST_OWNER_ID = "owner-alice-uid"


@pytest.fixture
def store() -> RecordStore:
    """Empty record store for one test."""
    return RecordStore()


@pytest.fixture
def gateway() -> MemoryGateway:
    """Fresh in-memory persistence gateway."""
    return MemoryGateway()


@pytest.fixture
def valid_token():
    """Bearer token for the test owner."""
    return create_access_token(TEST_OWNER_ID)


@pytest.fixture
def auth_headers(valid_token):
    return {"Authorization": f"Bearer {valid_token}"}


@pytest_asyncio.fixture
async def client(gateway):
    """API client whose persistence is the in-memory gateway."""
    app.dependency_overrides[get_gateway] = lambda: gateway
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_lending():
    """Create payload for a pending loan to Alice."""
    return {
        "personName": "Alice",
        "amount": 1000,
        "date": datetime(2026, 10, 1, 12, 0).isoformat(),
        "type": "lending",
        "status": "pending",
        "amountReturned": 0
    }
