from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import ApiKey, KeyUsageStats


class IApiKeyRepository(ABC):
    """ApiKey repository interface - application layer"""

    @abstractmethod
    async def save(self, api_key: ApiKey, ttl_seconds: int) -> ApiKey:
        """Persist a key record (caller supplies the hashed form) for ttl_seconds"""
        pass

    @abstractmethod
    async def get_by_id(self, key_id: str) -> Optional[ApiKey]:
        """Get key record by ID"""
        pass

    @abstractmethod
    async def get_id_by_hash(self, key_hash: str) -> Optional[str]:
        """Resolve a secret hash to its key ID"""
        pass

    @abstractmethod
    async def save_hash_mapping(self, key_hash: str, key_id: str, ttl_seconds: int) -> None:
        """Map a secret hash to a key ID"""
        pass

    @abstractmethod
    async def delete_hash_mapping(self, key_hash: str) -> None:
        """Remove a secret hash mapping"""
        pass

    @abstractmethod
    async def get_user_key_ids(self, user_id: str) -> List[str]:
        """Key IDs tracked for a user, oldest first"""
        pass

    @abstractmethod
    async def add_user_key_id(self, user_id: str, key_id: str) -> None:
        """Track a key ID for a user"""
        pass

    @abstractmethod
    async def remove_user_key_id(self, user_id: str, key_id: str) -> None:
        """Stop tracking a key ID for a user"""
        pass

    @abstractmethod
    async def list_all(self) -> List[ApiKey]:
        """Every stored key record (pattern scan, sweeps only)"""
        pass

    @abstractmethod
    async def add_pending_deactivation(self, key_id: str) -> None:
        """Record that a rotated key must be deactivated after its grace period"""
        pass

    @abstractmethod
    async def get_pending_deactivations(self) -> List[str]:
        """Key IDs awaiting grace-period deactivation"""
        pass

    @abstractmethod
    async def remove_pending_deactivation(self, key_id: str) -> None:
        """Clear a pending deactivation record"""
        pass

    @abstractmethod
    async def increment_usage(self, key_id: str, success: bool, used_at: datetime) -> None:
        """Bump request (and error) counters for a key"""
        pass

    @abstractmethod
    async def get_usage(self, key_id: str) -> KeyUsageStats:
        """Read request counters for a key"""
        pass

    @abstractmethod
    async def total_usage(self) -> int:
        """Sum of request counters across all keys"""
        pass
