import logging
from typing import List, Optional

from pydantic import ValidationError

from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.services.key_value_store import IKeyValueStore
from src.domain.entities import AuditEvent

logger = logging.getLogger(__name__)

EVENT_KEY = "audit:event:{}"
USER_INDEX_KEY = "audit:user:{}"
IP_INDEX_KEY = "audit:ip:{}"
ACTION_INDEX_KEY = "audit:action:{}"
RECENT_INDEX_KEY = "audit:recent"

RECENT_INDEX_MAX_LENGTH = 10_000


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation over the key-value store"""

    def __init__(self, store: IKeyValueStore, retention_seconds: int):
        self.store = store
        self.retention_seconds = retention_seconds

    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Persist the event, then prepend its id to each applicable index"""
        await self.store.set_with_expiry(
            EVENT_KEY.format(audit_event.id),
            audit_event.model_dump_json(),
            self.retention_seconds,
        )

        if audit_event.user_id:
            await self._index(USER_INDEX_KEY.format(audit_event.user_id), audit_event.id)
        await self._index(IP_INDEX_KEY.format(audit_event.source.ip), audit_event.id)
        await self._index(ACTION_INDEX_KEY.format(audit_event.action), audit_event.id)

        await self._index(RECENT_INDEX_KEY, audit_event.id)
        await self.store.list_trim(RECENT_INDEX_KEY, 0, RECENT_INDEX_MAX_LENGTH - 1)

        return audit_event

    async def get_by_id(self, event_id: str) -> Optional[AuditEvent]:
        """Get event by ID"""
        raw = await self.store.get(EVENT_KEY.format(event_id))
        if raw is None:
            return None
        try:
            return AuditEvent.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Skipping unreadable audit event {event_id}")
            return None

    async def get_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        return await self._read_index(USER_INDEX_KEY.format(user_id), limit, offset)

    async def get_by_ip(
        self, ip: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        return await self._read_index(IP_INDEX_KEY.format(ip), limit, offset)

    async def get_by_action(
        self, action: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        return await self._read_index(ACTION_INDEX_KEY.format(action), limit, offset)

    async def get_recent(self, limit: int = 50, offset: int = 0) -> List[AuditEvent]:
        return await self._read_index(RECENT_INDEX_KEY, limit, offset)

    async def _index(self, list_key: str, event_id: str) -> None:
        await self.store.list_push_front(list_key, event_id)
        await self.store.expire(list_key, self.retention_seconds)

    async def _read_index(self, list_key: str, limit: int, offset: int) -> List[AuditEvent]:
        """
        Resolve an index window.

        Index order is not trustworthy under concurrent writers, so results
        are re-sorted newest first. Ids whose event already expired are skipped.
        """
        if limit <= 0:
            return []
        event_ids = await self.store.list_range(list_key, offset, offset + limit - 1)

        events = []
        for event_id in event_ids:
            event = await self.get_by_id(event_id)
            if event is not None:
                events.append(event)

        return sorted(events, key=lambda e: e.timestamp, reverse=True)
