"""
API Key Use Case

Generation, validation and deactivation of API credentials.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import KeyRotationSettings
from src.domain.base import utcnow
from src.domain.entities import ApiKey, KeyUsageStats
from src.domain.errors import Internal, NotFound, SecurityServiceError
from src.domain.result import Result, Return

logger = logging.getLogger(__name__)

SECRET_BYTES = 32


def hash_api_key(secret: str) -> str:
    """One-way SHA-256 hex digest; the only form of a secret the store ever sees"""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def create_secure_key(prefix: str) -> str:
    return f"{prefix}{secrets.token_urlsafe(SECRET_BYTES)}"


class ApiKeyUseCase:
    """
    Use case for API key management.

    Business Rules:
    - Secrets are 256-bit random values with an identifying prefix
    - Only the hash is stored; the plaintext is returned once, at generation
    - A user keeps at most `max_active_keys` active keys, oldest deactivated first;
      rotated keys still in their grace period do not count
    - Expired keys and rotated keys past their grace period never validate
    - Deactivated records linger for a short residual TTL for auditing
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: KeyRotationSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.clock = clock

    async def generate_api_key(
        self,
        name: str,
        user_id: Optional[str] = None,
        permissions: Optional[List[str]] = None,
        expiry_days: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ApiKey:
        """
        Generate a new API key.

        Args:
            name: Human readable key name
            user_id: Owning user, if any
            permissions: Granted permissions, ["read"] when omitted
            expiry_days: Lifetime in days, the configured expiry when omitted
            metadata: Free-form key metadata

        Returns:
            The new key record with `key` holding the plaintext secret

        Raises:
            StoreUnavailable: store write failed
            Internal: unexpected failure
        """
        now = self.clock()
        days = expiry_days or self.settings.key_expiry_days
        secret = create_secure_key(self.settings.key_prefix)

        api_key = ApiKey(
            key=hash_api_key(secret),
            name=name,
            user_id=user_id,
            permissions=list(permissions) if permissions else ["read"],
            created_at=now,
            expires_at=now + timedelta(days=days),
            key_metadata=dict(metadata or {}),
        )
        ttl_seconds = days * 24 * 60 * 60

        async with self.uow:
            try:
                await self.uow.api_keys.save(api_key, ttl_seconds)
                await self.uow.api_keys.save_hash_mapping(api_key.key, api_key.id, ttl_seconds)
                if user_id:
                    await self.uow.api_keys.add_user_key_id(user_id, api_key.id)
                    await self._enforce_key_limit(user_id)
            except SecurityServiceError:
                logger.error(f"Failed to generate API key for user {user_id}", exc_info=True)
                raise
            except Exception as e:
                logger.error(f"Failed to generate API key for user {user_id}", exc_info=True)
                raise Internal("Failed to generate API key") from e

        logger.info(
            f"API key generated: id={api_key.id} user_id={user_id} "
            f"permissions={api_key.permissions} expires_at={api_key.expires_at.isoformat()}"
        )
        return api_key.model_copy(update={"key": secret})

    async def validate_api_key(self, secret: str) -> Optional[ApiKey]:
        """
        Resolve a presented secret to its active key.

        Returns:
            The key record carrying the plaintext secret, or None when the
            secret is unknown, inactive, expired or past its rotation grace period
        """
        if not secret:
            return None

        now = self.clock()
        async with self.uow:
            try:
                key_id = await self.uow.api_keys.get_id_by_hash(hash_api_key(secret))
                if key_id is None:
                    return None

                api_key = await self.uow.api_keys.get_by_id(key_id)
                if api_key is None or not api_key.is_active:
                    return None

                if api_key.is_expired(now) or api_key.is_past_grace_period(now):
                    await self._deactivate(api_key)
                    return None

                updated = api_key.model_copy(update={"last_used_at": now})
                await self.uow.api_keys.save(updated, self._remaining_ttl(updated, now))
                await self.uow.api_keys.increment_usage(updated.id, True, now)
            except Exception:
                logger.error("Failed to validate API key", exc_info=True)
                return None

        return updated.model_copy(update={"key": secret})

    async def deactivate_key(self, key_id: str) -> Result[ApiKey]:
        """
        Deactivate a key immediately.

        Returns:
            Result with the deactivated record, or NotFound when the key does
            not exist (or its residual record expired)

        Raises:
            StoreUnavailable: store write failed
        """
        async with self.uow:
            try:
                api_key = await self.uow.api_keys.get_by_id(key_id)
                if api_key is None:
                    return Return.err(
                        NotFound(f"API key {key_id} not found", code="KEY_NOT_FOUND")
                    )
                return Return.ok(await self._deactivate(api_key))
            except SecurityServiceError:
                raise
            except Exception as e:
                logger.error(f"Failed to deactivate API key {key_id}", exc_info=True)
                raise Internal("Failed to deactivate API key") from e

    async def get_user_keys(self, user_id: str) -> List[ApiKey]:
        """Keys tracked for a user, oldest first. Records hold the hash, never the secret."""
        async with self.uow:
            try:
                key_ids = await self.uow.api_keys.get_user_key_ids(user_id)
                keys = []
                for key_id in key_ids:
                    api_key = await self.uow.api_keys.get_by_id(key_id)
                    if api_key is not None:
                        keys.append(api_key)
            except Exception:
                logger.error(f"Failed to get API keys for user {user_id}", exc_info=True)
                return []
        return sorted(keys, key=lambda k: k.created_at)

    async def get_key_stats(self, key_id: str) -> Optional[KeyUsageStats]:
        async with self.uow:
            try:
                return await self.uow.api_keys.get_usage(key_id)
            except Exception:
                logger.error(f"Failed to get usage stats for API key {key_id}", exc_info=True)
                return None

    async def record_key_usage(self, key_id: str, success: bool = True) -> Result[KeyUsageStats]:
        """
        Count one request made with a key, reported by the service that accepted it.

        Returns:
            Result with the updated counters, or NotFound for an unknown key

        Raises:
            StoreUnavailable: store write failed
        """
        async with self.uow:
            try:
                if await self.uow.api_keys.get_by_id(key_id) is None:
                    return Return.err(
                        NotFound(f"API key {key_id} not found", code="KEY_NOT_FOUND")
                    )
                await self.uow.api_keys.increment_usage(key_id, success, self.clock())
                return Return.ok(await self.uow.api_keys.get_usage(key_id))
            except SecurityServiceError:
                raise
            except Exception as e:
                logger.error(f"Failed to record usage for API key {key_id}", exc_info=True)
                raise Internal("Failed to record API key usage") from e

    async def _enforce_key_limit(self, user_id: str) -> None:
        key_ids = await self.uow.api_keys.get_user_key_ids(user_id)

        active = []
        for key_id in key_ids:
            api_key = await self.uow.api_keys.get_by_id(key_id)
            if api_key is None:
                # Record expired out of the store; stop tracking it
                await self.uow.api_keys.remove_user_key_id(user_id, key_id)
            elif api_key.is_active and api_key.deactivate_after is None:
                # Rotated keys in their grace period are already on their way out
                active.append(api_key)

        excess = len(active) - self.settings.max_active_keys
        if excess <= 0:
            return

        active.sort(key=lambda k: k.created_at)
        for api_key in active[:excess]:
            await self._deactivate(api_key)
            logger.info(
                f"API key evicted over per-user limit: id={api_key.id} user_id={user_id}"
            )

    async def _deactivate(self, api_key: ApiKey) -> ApiKey:
        """Must be called inside an open unit of work"""
        deactivated = api_key.model_copy(update={"is_active": False})
        await self.uow.api_keys.save(deactivated, self.settings.deactivated_retention_seconds)
        await self.uow.api_keys.delete_hash_mapping(api_key.key)
        if api_key.user_id:
            await self.uow.api_keys.remove_user_key_id(api_key.user_id, api_key.id)
        if api_key.deactivate_after is not None:
            await self.uow.api_keys.remove_pending_deactivation(api_key.id)

        logger.info(f"API key deactivated: id={api_key.id} user_id={api_key.user_id}")
        return deactivated

    @staticmethod
    def _remaining_ttl(api_key: ApiKey, now: datetime) -> int:
        return max(1, int((api_key.expires_at - now).total_seconds()))
