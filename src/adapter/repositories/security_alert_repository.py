import logging
from typing import List, Optional, Set

from pydantic import ValidationError

from src.app.repositories.security_alert_repository import ISecurityAlertRepository
from src.app.services.key_value_store import IKeyValueStore
from src.domain.entities import SecurityAlert

logger = logging.getLogger(__name__)

ALERT_KEY = "alert:{}"
ACTIVE_ALERTS_KEY = "alert:active"
PATTERN_MATCH_KEY = "alert:pattern:{}:{}"


class SecurityAlertRepository(ISecurityAlertRepository):
    """SecurityAlert repository implementation over the key-value store"""

    def __init__(self, store: IKeyValueStore, retention_seconds: int):
        self.store = store
        self.retention_seconds = retention_seconds

    async def create(self, alert: SecurityAlert) -> SecurityAlert:
        await self.store.set_with_expiry(
            ALERT_KEY.format(alert.id), alert.model_dump_json(), self.retention_seconds
        )
        await self.store.list_push_front(ACTIVE_ALERTS_KEY, alert.id)
        await self.store.expire(ACTIVE_ALERTS_KEY, self.retention_seconds)
        return alert

    async def get_by_id(self, alert_id: str) -> Optional[SecurityAlert]:
        raw = await self.store.get(ALERT_KEY.format(alert_id))
        if raw is None:
            return None
        try:
            return SecurityAlert.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Skipping unreadable security alert {alert_id}")
            return None

    async def update(self, alert: SecurityAlert) -> SecurityAlert:
        await self.store.set_with_expiry(
            ALERT_KEY.format(alert.id), alert.model_dump_json(), self.retention_seconds
        )
        return alert

    async def get_indexed(self, limit: int = 50) -> List[SecurityAlert]:
        if limit <= 0:
            return []
        alert_ids = await self.store.list_range(ACTIVE_ALERTS_KEY, 0, limit - 1)

        alerts = []
        for alert_id in alert_ids:
            alert = await self.get_by_id(alert_id)
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def remove_from_active_index(self, alert_id: str) -> None:
        await self.store.list_remove(ACTIVE_ALERTS_KEY, alert_id)

    async def get_alerted_event_ids(self, pattern_id: str, event_ids: List[str]) -> Set[str]:
        alerted = set()
        for event_id in event_ids:
            if await self.store.get(PATTERN_MATCH_KEY.format(pattern_id, event_id)):
                alerted.add(event_id)
        return alerted

    async def mark_events_alerted(
        self, pattern_id: str, event_ids: List[str], ttl_seconds: int
    ) -> None:
        for event_id in event_ids:
            await self.store.set_with_expiry(
                PATTERN_MATCH_KEY.format(pattern_id, event_id), "1", ttl_seconds
            )
