from abc import ABC, abstractmethod

from src.app.repositories.api_key_repository import IApiKeyRepository
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.security_alert_repository import ISecurityAlertRepository
from src.app.repositories.security_metrics_repository import ISecurityMetricsRepository


class UnitOfWork(ABC):
    """
    Abstract UnitOfWork - defines repository access over the shared store

    Store writes take effect immediately and are individually atomic. There is
    no rollback: an operation interrupted half way leaves its earlier writes.
    """

    # Repository properties (initialized in __aenter__)
    audit_events: IAuditEventRepository
    alerts: ISecurityAlertRepository
    api_keys: IApiKeyRepository
    metrics: ISecurityMetricsRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass
