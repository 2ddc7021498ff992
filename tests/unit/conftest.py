import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.memory_store import InMemoryKeyValueStore
from src.adapter.services.unit_of_work import KeyValueUnitOfWork
from src.app.settings import AuditSettings, KeyRotationSettings, MonitoringSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase
from tests.fixtures.factories import FakeClock, RecordingDispatcher


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    uow.audit_events.get_by_user = AsyncMock(return_value=[])
    uow.audit_events.get_by_ip = AsyncMock(return_value=[])
    uow.audit_events.get_by_action = AsyncMock(return_value=[])
    uow.audit_events.get_recent = AsyncMock(return_value=[])

    uow.alerts = MagicMock()
    uow.alerts.create = AsyncMock()
    uow.alerts.get_by_id = AsyncMock(return_value=None)
    uow.alerts.update = AsyncMock()
    uow.alerts.get_indexed = AsyncMock(return_value=[])
    uow.alerts.remove_from_active_index = AsyncMock()
    uow.alerts.get_alerted_event_ids = AsyncMock(return_value=set())
    uow.alerts.mark_events_alerted = AsyncMock()

    uow.api_keys = MagicMock()
    uow.metrics = MagicMock()
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def audit_settings():
    return AuditSettings()


@pytest.fixture
def key_settings():
    return KeyRotationSettings()


@pytest.fixture
def monitoring_settings():
    return MonitoringSettings()


@pytest.fixture
def uow(memory_store, audit_settings):
    return KeyValueUnitOfWork(memory_store, audit_settings.retention_seconds)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def alert_use_case(uow, clock):
    return AlertLifecycleUseCase(uow, clock=clock)