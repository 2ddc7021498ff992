from contextlib import asynccontextmanager
from typing import List, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from src.app.services.key_value_store import IKeyValueStore
from src.domain.errors import StoreUnavailable


class RedisKeyValueStore(IKeyValueStore):
    """Key-value store implementation using redis.asyncio"""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        return cls(aioredis.from_url(url, decode_responses=True))

    @asynccontextmanager
    async def _command(self, name: str):
        try:
            yield
        except (RedisError, OSError) as e:
            raise StoreUnavailable(f"Redis {name} failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        async with self._command("GET"):
            return await self.client.get(key)

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._command("SETEX"):
            await self.client.setex(key, max(1, int(ttl_seconds)), value)

    async def delete(self, key: str) -> bool:
        async with self._command("DEL"):
            return await self.client.delete(key) > 0

    async def list_push_front(self, list_key: str, value: str) -> int:
        async with self._command("LPUSH"):
            return await self.client.lpush(list_key, value)

    async def list_range(self, list_key: str, start: int, stop: int) -> List[str]:
        async with self._command("LRANGE"):
            return await self.client.lrange(list_key, start, stop)

    async def list_remove(self, list_key: str, value: str) -> int:
        async with self._command("LREM"):
            return await self.client.lrem(list_key, 0, value)

    async def list_trim(self, list_key: str, start: int, stop: int) -> None:
        async with self._command("LTRIM"):
            await self.client.ltrim(list_key, start, stop)

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        async with self._command("EXPIRE"):
            return bool(await self.client.expire(key, max(1, int(ttl_seconds))))

    async def increment(self, key: str) -> int:
        async with self._command("INCR"):
            return await self.client.incr(key)

    async def keys_matching(self, pattern: str) -> List[str]:
        # SCAN instead of KEYS so a sweep never blocks the server
        async with self._command("SCAN"):
            return [key async for key in self.client.scan_iter(match=pattern, count=500)]

    async def ping(self) -> bool:
        async with self._command("PING"):
            return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()
