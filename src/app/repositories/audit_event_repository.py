from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import AuditEvent


class IAuditEventRepository(ABC):
    """AuditEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, audit_event: AuditEvent) -> AuditEvent:
        """Persist a new audit event (immutable) and index it"""
        pass

    @abstractmethod
    async def get_by_id(self, event_id: str) -> Optional[AuditEvent]:
        """Get event by ID"""
        pass

    @abstractmethod
    async def get_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        """Events from the user index window, newest first"""
        pass

    @abstractmethod
    async def get_by_ip(
        self, ip: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        """Events from the IP index window, newest first"""
        pass

    @abstractmethod
    async def get_by_action(
        self, action: str, limit: int = 50, offset: int = 0
    ) -> List[AuditEvent]:
        """Events from the action index window, newest first"""
        pass

    @abstractmethod
    async def get_recent(self, limit: int = 50, offset: int = 0) -> List[AuditEvent]:
        """Events from the global recent index window, newest first"""
        pass
