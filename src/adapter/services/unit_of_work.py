from src.adapter.repositories.api_key_repository import ApiKeyRepository
from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.security_alert_repository import SecurityAlertRepository
from src.adapter.repositories.security_metrics_repository import SecurityMetricsRepository
from src.app.services.key_value_store import IKeyValueStore
from src.app.services.unit_of_work import UnitOfWork


class KeyValueUnitOfWork(UnitOfWork):
    """Key-value store implementation of UnitOfWork pattern"""

    def __init__(self, store: IKeyValueStore, retention_seconds: int):
        self.store = store
        self.retention_seconds = retention_seconds

    async def __aenter__(self):
        # Initialize all repositories with the store
        self.audit_events = AuditEventRepository(self.store, self.retention_seconds)
        self.alerts = SecurityAlertRepository(self.store, self.retention_seconds)
        self.api_keys = ApiKeyRepository(self.store)
        self.metrics = SecurityMetricsRepository(self.store)
        return self

    async def __aexit__(self, *args):
        return False
