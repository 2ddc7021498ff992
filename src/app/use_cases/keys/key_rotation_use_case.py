"""
Key Rotation Use Case

Zero-downtime rotation and periodic sweeps over stored API keys.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import KeyRotationSettings
from src.domain.base import utcnow
from src.domain.entities import ApiKey
from src.domain.errors import Internal, SecurityServiceError
from .api_key_use_case import ApiKeyUseCase

logger = logging.getLogger(__name__)


class KeyRotationUseCase:
    """
    Use case for API key rotation.

    Business Rules:
    - Active keys older than the rotation interval get a replacement with the
      same permissions
    - The old key keeps validating until `deactivate_after` (grace period),
      tracked by a persisted pending-deactivation record
    - A key already waiting for deactivation is not rotated again
    - Sweeps are idempotent and keep going past individual failures
    """

    def __init__(
        self,
        uow: UnitOfWork,
        keys: ApiKeyUseCase,
        settings: KeyRotationSettings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.keys = keys
        self.settings = settings
        self.clock = clock

    def should_rotate(self, api_key: ApiKey, now: Optional[datetime] = None) -> bool:
        now = now or self.clock()
        if not api_key.is_active or api_key.deactivate_after is not None:
            return False
        return now - api_key.created_at >= timedelta(days=self.settings.rotation_interval_days)

    async def rotate_user_keys(self, user_id: str) -> List[ApiKey]:
        """
        Rotate every eligible key of a user.

        Args:
            user_id: Owning user

        Returns:
            Replacement keys, each carrying its plaintext secret

        Raises:
            StoreUnavailable: store write failed
            Internal: unexpected failure
        """
        try:
            async with self.uow:
                key_ids = await self.uow.api_keys.get_user_key_ids(user_id)
                candidates = []
                for key_id in key_ids:
                    api_key = await self.uow.api_keys.get_by_id(key_id)
                    if api_key is not None and self.should_rotate(api_key):
                        candidates.append(api_key)

            rotated = []
            for old_key in candidates:
                replacement = await self._rotate_key(old_key)
                if replacement is not None:
                    rotated.append(replacement)
        except SecurityServiceError:
            logger.error(f"Failed to rotate API keys for user {user_id}", exc_info=True)
            raise
        except Exception as e:
            logger.error(f"Failed to rotate API keys for user {user_id}", exc_info=True)
            raise Internal("Failed to rotate API keys") from e

        if rotated:
            logger.info(f"Rotated {len(rotated)} API keys for user {user_id}")
        return rotated

    async def rotate_all_keys(self) -> int:
        """Rotate eligible keys of every user. Returns the number of replacements issued."""
        now = self.clock()
        async with self.uow:
            try:
                all_keys = await self.uow.api_keys.list_all()
            except Exception:
                logger.error("Failed to list API keys for rotation sweep", exc_info=True)
                return 0

        user_ids = []
        for api_key in all_keys:
            if api_key.user_id and api_key.user_id not in user_ids and self.should_rotate(api_key, now):
                user_ids.append(api_key.user_id)

        rotated = 0
        for user_id in user_ids:
            try:
                rotated += len(await self.rotate_user_keys(user_id))
            except Exception:
                logger.error(f"Rotation sweep failed for user {user_id}", exc_info=True)

        logger.info(f"Key rotation sweep finished: users={len(user_ids)} rotated={rotated}")
        return rotated

    async def cleanup_expired_keys(self) -> int:
        """Deactivate every active key past its expiry. Returns the number deactivated."""
        now = self.clock()
        async with self.uow:
            try:
                all_keys = await self.uow.api_keys.list_all()
            except Exception:
                logger.error("Failed to list API keys for expiry cleanup", exc_info=True)
                return 0

        cleaned = 0
        for api_key in all_keys:
            if not api_key.is_active or not api_key.is_expired(now):
                continue
            try:
                result = await self.keys.deactivate_key(api_key.id)
                if result.is_ok():
                    cleaned += 1
            except Exception:
                logger.error(f"Failed to deactivate expired API key {api_key.id}", exc_info=True)

        logger.info(f"Expired API key cleanup finished: deactivated={cleaned}")
        return cleaned

    async def process_pending_deactivations(self) -> int:
        """Deactivate rotated keys whose grace period has ended. Returns the number deactivated."""
        now = self.clock()
        async with self.uow:
            try:
                pending = await self.uow.api_keys.get_pending_deactivations()
            except Exception:
                logger.error("Failed to read pending key deactivations", exc_info=True)
                return 0

        processed = 0
        for key_id in pending:
            try:
                async with self.uow:
                    api_key = await self.uow.api_keys.get_by_id(key_id)
                    if api_key is None or not api_key.is_active:
                        await self.uow.api_keys.remove_pending_deactivation(key_id)
                        continue
                if not api_key.is_past_grace_period(now):
                    continue
                result = await self.keys.deactivate_key(key_id)
                if result.is_ok():
                    processed += 1
            except Exception:
                logger.error(f"Failed to process pending deactivation {key_id}", exc_info=True)

        if processed:
            logger.info(f"Deactivated {processed} rotated API keys after grace period")
        return processed

    async def _rotate_key(self, old_key: ApiKey) -> Optional[ApiKey]:
        now = self.clock()
        ttl_seconds = max(1, int((old_key.expires_at - now).total_seconds()))

        # Schedule the old key first so the replacement never evicts it over the cap
        async with self.uow:
            current = await self.uow.api_keys.get_by_id(old_key.id)
            if current is None or not self.should_rotate(current, now):
                return None
            pending = current.model_copy(
                update={"deactivate_after": now + timedelta(days=self.settings.grace_period_days)}
            )
            await self.uow.api_keys.save(pending, ttl_seconds)
            await self.uow.api_keys.add_pending_deactivation(pending.id)

        try:
            replacement = await self.keys.generate_api_key(
                name=old_key.name,
                user_id=old_key.user_id,
                permissions=old_key.permissions,
                metadata={**old_key.key_metadata, "rotated_from": old_key.id},
            )
        except Exception:
            async with self.uow:
                await self.uow.api_keys.save(current, ttl_seconds)
                await self.uow.api_keys.remove_pending_deactivation(current.id)
            raise

        async with self.uow:
            marked = pending.model_copy(update={"replaced_by": replacement.id})
            await self.uow.api_keys.save(marked, ttl_seconds)

        logger.info(
            f"API key rotated: old_id={old_key.id} new_id={replacement.id} "
            f"user_id={old_key.user_id} deactivate_after={marked.deactivate_after.isoformat()}"
        )
        return replacement
