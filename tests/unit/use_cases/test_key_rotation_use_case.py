import pytest
from unittest.mock import AsyncMock

from src.app.settings import KeyRotationSettings
from src.app.use_cases.keys import ApiKeyUseCase, KeyRotationUseCase
from src.domain.errors import StoreUnavailable


def _use_cases(uow, clock, settings=None):
    settings = settings or KeyRotationSettings()
    keys = ApiKeyUseCase(uow, settings, clock=clock)
    return keys, KeyRotationUseCase(uow, keys, settings, clock=clock)


@pytest.mark.asyncio
async def test_young_keys_are_not_rotated(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    await keys.generate_api_key("ci", user_id="alice")
    clock.advance(days=29)

    assert await rotation.rotate_user_keys("alice") == []


@pytest.mark.asyncio
async def test_rotation_keeps_permissions_and_grace_period(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    old = await keys.generate_api_key("ci", user_id="alice", permissions=["read", "deploy"])
    clock.advance(days=30)

    rotated = await rotation.rotate_user_keys("alice")

    assert len(rotated) == 1
    replacement = rotated[0]
    assert replacement.permissions == ["read", "deploy"]
    assert replacement.key_metadata["rotated_from"] == old.id

    # both validate during the grace period
    clock.advance(days=6)
    assert await keys.validate_api_key(old.key) is not None
    assert await keys.validate_api_key(replacement.key) is not None

    clock.advance(days=1)
    assert await keys.validate_api_key(old.key) is None
    assert await keys.validate_api_key(replacement.key) is not None


@pytest.mark.asyncio
async def test_pending_key_is_not_rotated_twice(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    await keys.generate_api_key("ci", user_id="alice")
    clock.advance(days=31)

    first = await rotation.rotate_user_keys("alice")
    second = await rotation.rotate_user_keys("alice")

    assert len(first) == 1
    assert second == []


@pytest.mark.asyncio
async def test_pending_deactivations_processed_after_grace(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    old = await keys.generate_api_key("ci", user_id="alice")
    clock.advance(days=30)
    await rotation.rotate_user_keys("alice")

    assert await rotation.process_pending_deactivations() == 0

    clock.advance(days=7)
    assert await rotation.process_pending_deactivations() == 1
    assert await rotation.process_pending_deactivations() == 0

    async with uow:
        stored = await uow.api_keys.get_by_id(old.id)
        pending = await uow.api_keys.get_pending_deactivations()
    assert stored.is_active is False
    assert pending == []


@pytest.mark.asyncio
async def test_rotate_all_keys_covers_every_user(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    await keys.generate_api_key("a", user_id="alice")
    await keys.generate_api_key("b", user_id="bob")
    await keys.generate_api_key("service")
    clock.advance(days=45)

    assert await rotation.rotate_all_keys() == 2
    assert await rotation.rotate_all_keys() == 0


@pytest.mark.asyncio
async def test_cleanup_expired_keys(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    short = await keys.generate_api_key("short", expiry_days=1)
    long = await keys.generate_api_key("long", expiry_days=60)
    clock.advance(days=2)

    assert await rotation.cleanup_expired_keys() == 1
    assert await rotation.cleanup_expired_keys() == 0
    assert await keys.validate_api_key(short.key) is None
    assert await keys.validate_api_key(long.key) is not None


@pytest.mark.asyncio
async def test_zero_grace_period_invalidates_old_key_immediately(uow, clock):
    keys, rotation = _use_cases(uow, clock, KeyRotationSettings(grace_period_days=0))
    old = await keys.generate_api_key("ci", user_id="alice")
    clock.advance(days=30)

    await rotation.rotate_user_keys("alice")

    assert await keys.validate_api_key(old.key) is None


@pytest.mark.asyncio
async def test_rotation_at_key_cap_keeps_old_keys_valid_during_grace(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    old_keys = [await keys.generate_api_key(f"k{i}", user_id="alice") for i in range(5)]
    clock.advance(days=30)

    rotated = await rotation.rotate_user_keys("alice")
    clock.advance(hours=1)

    assert len(rotated) == 5
    for old in old_keys:
        assert await keys.validate_api_key(old.key) is not None
    for replacement in rotated:
        assert await keys.validate_api_key(replacement.key) is not None

    async with uow:
        pending = await uow.api_keys.get_pending_deactivations()
        stored = [await uow.api_keys.get_by_id(old.id) for old in old_keys]
    assert sorted(pending) == sorted(old.id for old in old_keys)
    assert {s.replaced_by for s in stored} == {r.id for r in rotated}

    clock.advance(days=7)
    assert await rotation.process_pending_deactivations() == 5
    for old in old_keys:
        assert await keys.validate_api_key(old.key) is None
    assert len(await keys.get_user_keys("alice")) == 5


@pytest.mark.asyncio
async def test_new_key_after_rotation_evicts_oldest_unrotated_key(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    old_keys = [await keys.generate_api_key(f"k{i}", user_id="alice") for i in range(5)]
    clock.advance(days=30)
    rotated = await rotation.rotate_user_keys("alice")

    clock.advance(minutes=1)
    await keys.generate_api_key("extra", user_id="alice")

    # the five pending keys stay valid; the oldest replacement goes
    for old in old_keys:
        assert await keys.validate_api_key(old.key) is not None
    assert await keys.validate_api_key(rotated[0].key) is None
    assert await keys.validate_api_key(rotated[-1].key) is not None


@pytest.mark.asyncio
async def test_failed_replacement_leaves_old_key_unscheduled(uow, clock):
    keys, rotation = _use_cases(uow, clock)
    old = await keys.generate_api_key("ci", user_id="alice")
    clock.advance(days=30)
    keys.generate_api_key = AsyncMock(side_effect=StoreUnavailable("down"))

    with pytest.raises(StoreUnavailable):
        await rotation.rotate_user_keys("alice")

    async with uow:
        stored = await uow.api_keys.get_by_id(old.id)
        pending = await uow.api_keys.get_pending_deactivations()
    assert stored.deactivate_after is None
    assert pending == []
