import pytest
from unittest.mock import AsyncMock

from src.domain.errors import StoreUnavailable


@pytest.mark.asyncio
async def test_create_and_list_alert(client, admin_headers, test_data):
    created = await client.post(
        "/alerts", json=test_data.get_copy("manual_alert"), headers=admin_headers
    )

    assert created.status_code == 201
    alert = created.json()
    assert alert["status"] == "open"
    assert alert["alert_metadata"] == {"ticket": "SEC-101"}

    response = await client.get("/alerts", headers=admin_headers)

    assert [a["id"] for a in response.json()["alerts"]] == [alert["id"]]


@pytest.mark.asyncio
async def test_resolved_alert_leaves_active_list(client, admin_headers, test_data):
    created = await client.post(
        "/alerts", json=test_data.get_copy("manual_alert"), headers=admin_headers
    )
    alert_id = created.json()["id"]

    investigating = await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "investigating"}, headers=admin_headers
    )
    resolved = await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "resolved"}, headers=admin_headers
    )
    response = await client.get("/alerts", headers=admin_headers)

    assert investigating.json()["status"] == "investigating"
    assert resolved.json()["status"] == "resolved"
    assert response.json()["alerts"] == []


@pytest.mark.asyncio
async def test_reopening_resolved_alert_is_rejected(client, admin_headers, test_data):
    created = await client.post(
        "/alerts", json=test_data.get_copy("manual_alert"), headers=admin_headers
    )
    alert_id = created.json()["id"]
    await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "investigating"}, headers=admin_headers
    )
    await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "false_positive"}, headers=admin_headers
    )

    response = await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "open"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_unknown_alert_is_404(client, admin_headers):
    response = await client.patch(
        "/alerts/missing/status", json={"status": "resolved"}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ALERT_NOT_FOUND"


@pytest.mark.asyncio
async def test_open_alert_cannot_skip_investigation(client, admin_headers, test_data):
    created = await client.post(
        "/alerts", json=test_data.get_copy("manual_alert"), headers=admin_headers
    )
    alert_id = created.json()["id"]

    response = await client.patch(
        f"/alerts/{alert_id}/status", json={"status": "resolved"}, headers=admin_headers
    )
    listed = await client.get("/alerts", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"
    assert [a["status"] for a in listed.json()["alerts"]] == ["open"]


@pytest.mark.asyncio
async def test_create_alert_store_outage_is_500(client, admin_headers, test_data, services):
    services.store.set_with_expiry = AsyncMock(side_effect=StoreUnavailable("down"))

    response = await client.post(
        "/alerts", json=test_data.get_copy("manual_alert"), headers=admin_headers
    )

    assert response.status_code == 500
    assert response.json()["error"] == {
        "code": "STORE_UNAVAILABLE",
        "message": "Internal server error",
    }
