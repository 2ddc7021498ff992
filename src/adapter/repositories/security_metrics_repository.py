import logging
from datetime import datetime
from typing import List

from pydantic import ValidationError

from src.app.repositories.security_metrics_repository import ISecurityMetricsRepository
from src.app.services.key_value_store import IKeyValueStore
from src.domain.entities import SecurityMetrics

logger = logging.getLogger(__name__)

METRICS_KEY = "security:metrics:{}"
METRICS_PATTERN = "security:metrics:*"

BUCKET_SECONDS = 5 * 60


def metrics_bucket(timestamp: datetime) -> int:
    return int(timestamp.timestamp() // BUCKET_SECONDS)


class SecurityMetricsRepository(ISecurityMetricsRepository):
    """SecurityMetrics snapshot repository over the key-value store"""

    def __init__(self, store: IKeyValueStore):
        self.store = store

    async def save(self, metrics: SecurityMetrics, ttl_seconds: int) -> None:
        await self.store.set_with_expiry(
            METRICS_KEY.format(metrics_bucket(metrics.timestamp)),
            metrics.model_dump_json(),
            ttl_seconds,
        )

    async def list_since(self, since: datetime) -> List[SecurityMetrics]:
        snapshots = []
        for key in await self.store.keys_matching(METRICS_PATTERN):
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                snapshot = SecurityMetrics.model_validate_json(raw)
            except ValidationError:
                logger.warning(f"Skipping unreadable metrics snapshot {key}")
                continue
            if snapshot.timestamp >= since:
                snapshots.append(snapshot)
        return sorted(snapshots, key=lambda m: m.timestamp)

    async def delete_older_than(self, cutoff: datetime) -> int:
        cutoff_bucket = metrics_bucket(cutoff)
        deleted = 0
        for key in await self.store.keys_matching(METRICS_PATTERN):
            try:
                bucket = int(key.rsplit(":", 1)[1])
            except ValueError:
                continue
            if bucket < cutoff_bucket and await self.store.delete(key):
                deleted += 1
        return deleted
