from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from src.domain.entities import SecurityMetrics


class ISecurityMetricsRepository(ABC):
    """SecurityMetrics snapshot repository interface - application layer"""

    @abstractmethod
    async def save(self, metrics: SecurityMetrics, ttl_seconds: int) -> None:
        """Persist a snapshot under its 5-minute bucket"""
        pass

    @abstractmethod
    async def list_since(self, since: datetime) -> List[SecurityMetrics]:
        """Snapshots taken at or after `since`, oldest first"""
        pass

    @abstractmethod
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete snapshot buckets before cutoff. Returns count deleted."""
        pass
