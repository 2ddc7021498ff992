import pytest
from unittest.mock import AsyncMock

from src.domain.errors import StoreUnavailable


@pytest.mark.asyncio
async def test_health_check_needs_no_admin_key(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "store": "ok"}


@pytest.mark.asyncio
async def test_health_check_reports_store_outage(client, services):
    services.store.ping = AsyncMock(side_effect=StoreUnavailable("down"))

    response = await client.get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "store": "unavailable"}
