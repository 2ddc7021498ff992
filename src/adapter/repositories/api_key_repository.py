import json
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from src.app.repositories.api_key_repository import IApiKeyRepository
from src.app.services.key_value_store import IKeyValueStore
from src.domain.entities import ApiKey, KeyUsageStats

logger = logging.getLogger(__name__)

KEY_RECORD_KEY = "apikey:key:{}"
KEY_RECORD_PATTERN = "apikey:key:*"
HASH_KEY = "apikey:hash:{}"
USER_KEYS_KEY = "apikey:user:{}"
PENDING_DEACTIVATION_KEY = "apikey:pending"
REQUESTS_KEY = "apikey:stats:{}:requests"
REQUESTS_PATTERN = "apikey:stats:*:requests"
ERRORS_KEY = "apikey:stats:{}:errors"
LAST_USED_KEY = "apikey:stats:{}:last_used"

USER_KEYS_TTL_SECONDS = 365 * 24 * 60 * 60
PENDING_TTL_SECONDS = 365 * 24 * 60 * 60
STATS_TTL_SECONDS = 30 * 24 * 60 * 60


class ApiKeyRepository(IApiKeyRepository):
    """ApiKey repository implementation over the key-value store"""

    def __init__(self, store: IKeyValueStore):
        self.store = store

    async def save(self, api_key: ApiKey, ttl_seconds: int) -> ApiKey:
        await self.store.set_with_expiry(
            KEY_RECORD_KEY.format(api_key.id), api_key.model_dump_json(), ttl_seconds
        )
        return api_key

    async def get_by_id(self, key_id: str) -> Optional[ApiKey]:
        raw = await self.store.get(KEY_RECORD_KEY.format(key_id))
        if raw is None:
            return None
        try:
            return ApiKey.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Skipping unreadable API key record {key_id}")
            return None

    async def get_id_by_hash(self, key_hash: str) -> Optional[str]:
        return await self.store.get(HASH_KEY.format(key_hash))

    async def save_hash_mapping(self, key_hash: str, key_id: str, ttl_seconds: int) -> None:
        await self.store.set_with_expiry(HASH_KEY.format(key_hash), key_id, ttl_seconds)

    async def delete_hash_mapping(self, key_hash: str) -> None:
        await self.store.delete(HASH_KEY.format(key_hash))

    async def get_user_key_ids(self, user_id: str) -> List[str]:
        raw = await self.store.get(USER_KEYS_KEY.format(user_id))
        if not raw:
            return []
        return list(json.loads(raw))

    async def add_user_key_id(self, user_id: str, key_id: str) -> None:
        key_ids = await self.get_user_key_ids(user_id)
        if key_id not in key_ids:
            key_ids.append(key_id)
            await self._save_user_key_ids(user_id, key_ids)

    async def remove_user_key_id(self, user_id: str, key_id: str) -> None:
        key_ids = await self.get_user_key_ids(user_id)
        if key_id in key_ids:
            key_ids.remove(key_id)
            await self._save_user_key_ids(user_id, key_ids)

    async def list_all(self) -> List[ApiKey]:
        keys = []
        for record_key in await self.store.keys_matching(KEY_RECORD_PATTERN):
            api_key = await self.get_by_id(record_key.split(":", 2)[2])
            if api_key is not None:
                keys.append(api_key)
        return keys

    async def add_pending_deactivation(self, key_id: str) -> None:
        await self.store.list_remove(PENDING_DEACTIVATION_KEY, key_id)
        await self.store.list_push_front(PENDING_DEACTIVATION_KEY, key_id)
        await self.store.expire(PENDING_DEACTIVATION_KEY, PENDING_TTL_SECONDS)

    async def get_pending_deactivations(self) -> List[str]:
        return await self.store.list_range(PENDING_DEACTIVATION_KEY, 0, -1)

    async def remove_pending_deactivation(self, key_id: str) -> None:
        await self.store.list_remove(PENDING_DEACTIVATION_KEY, key_id)

    async def increment_usage(self, key_id: str, success: bool, used_at: datetime) -> None:
        requests_key = REQUESTS_KEY.format(key_id)
        await self.store.increment(requests_key)
        await self.store.expire(requests_key, STATS_TTL_SECONDS)
        if not success:
            errors_key = ERRORS_KEY.format(key_id)
            await self.store.increment(errors_key)
            await self.store.expire(errors_key, STATS_TTL_SECONDS)
        await self.store.set_with_expiry(
            LAST_USED_KEY.format(key_id), used_at.isoformat(), STATS_TTL_SECONDS
        )

    async def get_usage(self, key_id: str) -> KeyUsageStats:
        requests = await self.store.get(REQUESTS_KEY.format(key_id))
        errors = await self.store.get(ERRORS_KEY.format(key_id))
        last_used = await self.store.get(LAST_USED_KEY.format(key_id))
        return KeyUsageStats(
            key_id=key_id,
            request_count=int(requests or 0),
            error_count=int(errors or 0),
            last_used=datetime.fromisoformat(last_used) if last_used else None,
        )

    async def total_usage(self) -> int:
        total = 0
        for counter_key in await self.store.keys_matching(REQUESTS_PATTERN):
            total += int(await self.store.get(counter_key) or 0)
        return total

    async def _save_user_key_ids(self, user_id: str, key_ids: List[str]) -> None:
        await self.store.set_with_expiry(
            USER_KEYS_KEY.format(user_id), json.dumps(key_ids), USER_KEYS_TTL_SECONDS
        )
