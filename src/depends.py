from datetime import datetime
from typing import Callable

from fastapi import Depends, Request

from src.adapter.services.memory_store import InMemoryKeyValueStore
from src.adapter.services.notification_dispatcher import LoggingNotificationDispatcher
from src.adapter.services.redis_store import RedisKeyValueStore
from src.adapter.services.unit_of_work import KeyValueUnitOfWork
from src.app.services.key_value_store import IKeyValueStore
from src.app.settings import (
    AuditSettings,
    KeyRotationSettings,
    MonitoringSettings,
    audit_settings_from_config,
    key_rotation_settings_from_config,
    monitoring_settings_from_config,
)
from src.app.use_cases.alerts import AlertLifecycleUseCase, SecurityNotifier
from src.app.use_cases.monitoring import SecurityJobs
from src.domain.base import utcnow
from src.domain.errors import Invalid


class SecurityServices:
    """Store, settings and collaborators shared by every request and job"""

    def __init__(
        self,
        store: IKeyValueStore,
        audit_settings: AuditSettings,
        key_settings: KeyRotationSettings,
        monitoring_settings: MonitoringSettings,
        notifier: SecurityNotifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.audit_settings = audit_settings
        self.key_settings = key_settings
        self.monitoring_settings = monitoring_settings
        self.notifier = notifier
        self.clock = clock

    def unit_of_work(self) -> KeyValueUnitOfWork:
        return KeyValueUnitOfWork(self.store, self.audit_settings.retention_seconds)

    def jobs(self) -> SecurityJobs:
        return SecurityJobs(
            self.unit_of_work,
            self.audit_settings,
            self.key_settings,
            self.monitoring_settings,
            notifier=self.notifier,
            clock=self.clock,
        )


def build_store(config) -> IKeyValueStore:
    backend = config.CACHE_BACKEND.lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "redis":
        return RedisKeyValueStore.from_url(config.REDIS_URL)
    raise Invalid(f"Unsupported CACHE_BACKEND {config.CACHE_BACKEND!r}", code="INVALID_CONFIG")


def build_services(config, store: IKeyValueStore = None, clock: Callable[[], datetime] = utcnow) -> SecurityServices:
    monitoring_settings = monitoring_settings_from_config(config)
    return SecurityServices(
        store=store if store is not None else build_store(config),
        audit_settings=audit_settings_from_config(config),
        key_settings=key_rotation_settings_from_config(config),
        monitoring_settings=monitoring_settings,
        notifier=SecurityNotifier(LoggingNotificationDispatcher(), monitoring_settings),
        clock=clock,
    )


def get_services(request: Request) -> SecurityServices:
    return request.app.state.services


async def get_unit_of_work(services: SecurityServices = Depends(get_services)):
    yield services.unit_of_work()


def get_alert_use_case(
    services: SecurityServices = Depends(get_services),
    uow=Depends(get_unit_of_work),
) -> AlertLifecycleUseCase:
    return AlertLifecycleUseCase(uow, services.notifier, clock=services.clock)
