from abc import ABC, abstractmethod
from typing import List, Optional, Set

from src.domain.entities import SecurityAlert


class ISecurityAlertRepository(ABC):
    """SecurityAlert repository interface - application layer"""

    @abstractmethod
    async def create(self, alert: SecurityAlert) -> SecurityAlert:
        """Persist a new alert and add it to the active-alerts index"""
        pass

    @abstractmethod
    async def get_by_id(self, alert_id: str) -> Optional[SecurityAlert]:
        """Get alert by ID"""
        pass

    @abstractmethod
    async def update(self, alert: SecurityAlert) -> SecurityAlert:
        """Re-persist an existing alert"""
        pass

    @abstractmethod
    async def get_indexed(self, limit: int = 50) -> List[SecurityAlert]:
        """Resolve the newest ids of the active-alerts index, any status"""
        pass

    @abstractmethod
    async def remove_from_active_index(self, alert_id: str) -> None:
        """Drop an alert id from the active-alerts index"""
        pass

    @abstractmethod
    async def get_alerted_event_ids(self, pattern_id: str, event_ids: List[str]) -> Set[str]:
        """Subset of event_ids already reported for a threat pattern"""
        pass

    @abstractmethod
    async def mark_events_alerted(
        self, pattern_id: str, event_ids: List[str], ttl_seconds: int
    ) -> None:
        """Remember that event_ids were reported for a threat pattern"""
        pass
