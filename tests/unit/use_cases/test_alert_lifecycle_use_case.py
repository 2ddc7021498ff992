import pytest

from src.app.settings import MonitoringSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase, CreateAlertCommand, SecurityNotifier
from src.domain.entities import AlertStatus, Severity
from src.domain.errors import Internal, Invalid, NotFound, StoreUnavailable
from tests.fixtures.factories import RecordingDispatcher


def _command(**overrides):
    values = {
        "type": "failed_login_attempts",
        "severity": Severity.high,
        "title": "Multiple Failed Login Attempts",
        "description": "5 failed login attempts",
        "source_ip": "203.0.113.9",
        "events": ["e1", "e2"],
    }
    values.update(overrides)
    return CreateAlertCommand(**values)


@pytest.mark.asyncio
async def test_create_alert_starts_open_and_is_listed(alert_use_case, clock):
    alert = await alert_use_case.create_alert(_command())

    assert alert.status == AlertStatus.open
    assert alert.timestamp == clock.now
    active = await alert_use_case.get_active_alerts()
    assert [a.id for a in active] == [alert.id]


@pytest.mark.asyncio
async def test_active_alerts_newest_first(alert_use_case, clock):
    first = await alert_use_case.create_alert(_command(title="first"))
    clock.advance(minutes=1)
    second = await alert_use_case.create_alert(_command(title="second"))

    active = await alert_use_case.get_active_alerts()

    assert [a.id for a in active] == [second.id, first.id]


@pytest.mark.asyncio
async def test_update_missing_alert_is_not_found_without_side_effect(alert_use_case, uow):
    result = await alert_use_case.update_alert_status("missing", "investigating")

    assert result.is_err()
    assert isinstance(result.error, NotFound)
    assert result.error.code == "ALERT_NOT_FOUND"
    async with uow:
        assert await uow.alerts.get_by_id("missing") is None
    assert await alert_use_case.get_active_alerts() == []


@pytest.mark.asyncio
async def test_forward_transitions(alert_use_case):
    alert = await alert_use_case.create_alert(_command())

    investigating = await alert_use_case.update_alert_status(alert.id, "investigating")
    assert investigating.is_ok()
    assert investigating.value.status == AlertStatus.investigating
    assert [a.id for a in await alert_use_case.get_active_alerts()] == [alert.id]

    resolved = await alert_use_case.update_alert_status(alert.id, "resolved")
    assert resolved.value.status == AlertStatus.resolved
    assert (await alert_use_case.get_alert(alert.id)).status == AlertStatus.resolved


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["resolved", "false_positive"])
async def test_open_alert_must_be_investigated_first(alert_use_case, target):
    alert = await alert_use_case.create_alert(_command())

    result = await alert_use_case.update_alert_status(alert.id, target)

    assert isinstance(result.error, Invalid)
    assert result.error.code == "INVALID_TRANSITION"
    assert (await alert_use_case.get_alert(alert.id)).status == AlertStatus.open
    assert [a.id for a in await alert_use_case.get_active_alerts()] == [alert.id]


@pytest.mark.asyncio
async def test_false_positive_prunes_active_index(alert_use_case, uow):
    alert = await alert_use_case.create_alert(_command())
    await alert_use_case.update_alert_status(alert.id, AlertStatus.investigating)

    await alert_use_case.update_alert_status(alert.id, AlertStatus.false_positive)

    async with uow:
        indexed = await uow.alerts.get_indexed(50)
    assert indexed == []
    assert await alert_use_case.get_active_alerts() == []


@pytest.mark.asyncio
async def test_backward_transition_is_rejected(alert_use_case):
    alert = await alert_use_case.create_alert(_command())
    await alert_use_case.update_alert_status(alert.id, "investigating")
    await alert_use_case.update_alert_status(alert.id, "resolved")

    result = await alert_use_case.update_alert_status(alert.id, "open")

    assert result.error.code == "INVALID_TRANSITION"
    assert (await alert_use_case.get_alert(alert.id)).status == AlertStatus.resolved


@pytest.mark.asyncio
async def test_same_status_is_a_no_op(alert_use_case):
    alert = await alert_use_case.create_alert(_command())

    unchanged = await alert_use_case.update_alert_status(alert.id, "open")

    assert unchanged.value.status == AlertStatus.open


@pytest.mark.asyncio
async def test_unknown_status_is_invalid(alert_use_case):
    alert = await alert_use_case.create_alert(_command())

    result = await alert_use_case.update_alert_status(alert.id, "closed")

    assert isinstance(result.error, Invalid)
    assert result.error.code == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_update_status_store_failure_raises(mock_uow, clock):
    mock_uow.alerts.get_by_id.side_effect = StoreUnavailable("down")

    with pytest.raises(StoreUnavailable):
        await AlertLifecycleUseCase(mock_uow, clock=clock).update_alert_status("a1", "investigating")


@pytest.mark.asyncio
async def test_create_alert_store_failure_raises(mock_uow, clock):
    mock_uow.alerts.create.side_effect = StoreUnavailable("down")

    with pytest.raises(StoreUnavailable):
        await AlertLifecycleUseCase(mock_uow, clock=clock).create_alert(_command())


@pytest.mark.asyncio
async def test_create_alert_unexpected_failure_is_internal(mock_uow, clock):
    mock_uow.alerts.create.side_effect = KeyError("boom")

    with pytest.raises(Internal):
        await AlertLifecycleUseCase(mock_uow, clock=clock).create_alert(_command())


@pytest.mark.asyncio
async def test_active_alerts_degrade_to_empty(mock_uow, clock):
    mock_uow.alerts.get_indexed.side_effect = StoreUnavailable("down")

    assert await AlertLifecycleUseCase(mock_uow, clock=clock).get_active_alerts() == []


@pytest.mark.asyncio
async def test_alerts_at_threshold_are_dispatched(uow, clock):
    dispatcher = RecordingDispatcher()
    notifier = SecurityNotifier(dispatcher, MonitoringSettings())
    use_case = AlertLifecycleUseCase(uow, notifier, clock=clock)

    await use_case.create_alert(_command(severity=Severity.low))
    assert dispatcher.sent == []

    alert = await use_case.create_alert(_command(severity=Severity.medium))
    assert [channel for channel, _ in dispatcher.sent] == ["email", "chat"]
    assert all(payload["alert_id"] == alert.id for _, payload in dispatcher.sent)
