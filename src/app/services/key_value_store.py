from abc import ABC, abstractmethod
from typing import List, Optional


class IKeyValueStore(ABC):
    """
    Key-value store interface - application layer

    Every single command is atomic. Sequences of commands are not; callers
    must tolerate interleaving with concurrent writers.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a string value, None if absent or expired"""
        pass

    @abstractmethod
    async def set_with_expiry(self, key: str, value: str, ttl_seconds: int) -> None:
        """Set a string value that expires after ttl_seconds"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        pass

    @abstractmethod
    async def list_push_front(self, list_key: str, value: str) -> int:
        """Prepend to a list. Returns the new list length."""
        pass

    @abstractmethod
    async def list_range(self, list_key: str, start: int, stop: int) -> List[str]:
        """Inclusive range read, negative indices count from the end"""
        pass

    @abstractmethod
    async def list_remove(self, list_key: str, value: str) -> int:
        """Remove every occurrence of value. Returns the number removed."""
        pass

    @abstractmethod
    async def list_trim(self, list_key: str, start: int, stop: int) -> None:
        """Keep only the inclusive range [start, stop] of a list"""
        pass

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> bool:
        """Refresh a key's time-to-live"""
        pass

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically increment an integer counter"""
        pass

    @abstractmethod
    async def keys_matching(self, pattern: str) -> List[str]:
        """
        Glob-style key scan.

        Expensive on large keyspaces; only periodic sweeps may call it.
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Health probe"""
        pass

    async def close(self) -> None:
        """Release connections; no-op for stores without any"""
        return None
