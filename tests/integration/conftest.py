import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config import ApplicationConfig
from src.adapter.services.memory_store import InMemoryKeyValueStore
from src.api.app import create_app
from src.depends import build_services
from tests.fixtures.json_loader import TestDataLoader


class TestConfig(ApplicationConfig):
    __test__ = False

    CACHE_BACKEND = "memory"
    SCHEDULER_ENABLED = False
    ADMIN_API_KEY = "test-admin-key-12345"


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture
def admin_headers():
    return {"X-Admin-API-Key": TestConfig.ADMIN_API_KEY}


@pytest.fixture
def services():
    return build_services(TestConfig, store=InMemoryKeyValueStore())


@pytest_asyncio.fixture
async def client(services):
    app = create_app(TestConfig, services=services)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
