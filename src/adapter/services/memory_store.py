import fnmatch
import time
from typing import Callable, Dict, List, Optional, Tuple, Union

from src.app.services.key_value_store import IKeyValueStore
from src.domain.errors import StoreUnavailable

_Value = Union[str, List[str]]


class InMemoryKeyValueStore(IKeyValueStore):
    """
    Process-local key-value store with per-key expiry.

    Selected with CACHE_BACKEND=memory. Follows Redis semantics for the
    commands it implements, including inclusive list ranges. Keys without an
    explicit expiry (lists, counters) live until deleted or expired.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[_Value, Optional[float]]] = {}

    def _live(self, key: str) -> Optional[_Value]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def _list(self, key: str) -> List[str]:
        value = self._live(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StoreUnavailable(f"WRONGTYPE {key} does not hold a list")
        return value

    def _expiry_of(self, key: str) -> Optional[float]:
        entry = self._data.get(key)
        return entry[1] if entry else None

    async def get(self, key: str) -> Optional[str]:
        value = self._live(key)
        if isinstance(value, list):
            raise StoreUnavailable(f"WRONGTYPE {key} holds a list")
        return value

    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        self._data[key] = (value, self._clock() + max(1, int(ttl_seconds)))

    async def delete(self, key: str) -> bool:
        existed = self._live(key) is not None
        self._data.pop(key, None)
        return existed

    async def list_push_front(self, list_key: str, value: str) -> int:
        items = self._list(list_key)
        items.insert(0, value)
        self._data[list_key] = (items, self._expiry_of(list_key))
        return len(items)

    async def list_range(self, list_key: str, start: int, stop: int) -> List[str]:
        items = self._list(list_key)
        size = len(items)
        if start < 0:
            start = max(size + start, 0)
        if stop < 0:
            stop = size + stop
        stop = min(stop, size - 1)
        if start > stop:
            return []
        return list(items[start : stop + 1])

    async def list_remove(self, list_key: str, value: str) -> int:
        items = self._list(list_key)
        kept = [item for item in items if item != value]
        removed = len(items) - len(kept)
        if removed:
            self._data[list_key] = (kept, self._expiry_of(list_key))
        return removed

    async def list_trim(self, list_key: str, start: int, stop: int) -> None:
        if self._live(list_key) is None:
            return
        kept = await self.list_range(list_key, start, stop)
        self._data[list_key] = (kept, self._expiry_of(list_key))

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        value = self._live(key)
        if value is None:
            return False
        self._data[key] = (value, self._clock() + max(1, int(ttl_seconds)))
        return True

    async def increment(self, key: str) -> int:
        value = self._live(key)
        try:
            count = int(value or 0) + 1
        except (TypeError, ValueError) as e:
            raise StoreUnavailable(f"{key} does not hold an integer") from e
        self._data[key] = (str(count), self._expiry_of(key))
        return count

    async def keys_matching(self, pattern: str) -> List[str]:
        return [
            key
            for key in list(self._data)
            if self._live(key) is not None and fnmatch.fnmatchcase(key, pattern)
        ]

    async def ping(self) -> bool:
        return True
