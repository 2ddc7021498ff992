import pytest

from src.app.settings import KeyRotationSettings
from src.app.use_cases.keys import ApiKeyUseCase, create_secure_key, hash_api_key
from src.domain.errors import NotFound


@pytest.fixture
def key_use_case(uow, key_settings, clock):
    return ApiKeyUseCase(uow, key_settings, clock=clock)


def test_secure_key_format():
    first = create_secure_key("tp_")
    second = create_secure_key("tp_")

    assert first.startswith("tp_")
    assert len(first) > 40
    assert first != second


def test_hash_is_deterministic_sha256():
    assert hash_api_key("tp_abc") == hash_api_key("tp_abc")
    assert len(hash_api_key("tp_abc")) == 64


@pytest.mark.asyncio
async def test_generate_then_validate_returns_plaintext(key_use_case, uow, clock):
    issued = await key_use_case.generate_api_key("ci", user_id="alice", permissions=["read", "write"])

    validated = await key_use_case.validate_api_key(issued.key)

    assert validated is not None
    assert validated.id == issued.id
    assert validated.key == issued.key
    assert validated.permissions == ["read", "write"]
    assert validated.last_used_at == clock.now

    async with uow:
        stored = await uow.api_keys.get_by_id(issued.id)
    assert stored.key == hash_api_key(issued.key)
    assert stored.key != issued.key


@pytest.mark.asyncio
async def test_unknown_secret_does_not_validate(key_use_case):
    await key_use_case.generate_api_key("ci")

    assert await key_use_case.validate_api_key("tp_not-a-real-key") is None
    assert await key_use_case.validate_api_key("") is None


@pytest.mark.asyncio
async def test_deactivated_key_no_longer_validates(key_use_case, uow):
    issued = await key_use_case.generate_api_key("ci", user_id="alice")

    result = await key_use_case.deactivate_key(issued.id)

    assert result.is_ok()
    assert result.value.is_active is False
    assert await key_use_case.validate_api_key(issued.key) is None
    assert await key_use_case.get_user_keys("alice") == []
    async with uow:
        assert await uow.api_keys.get_id_by_hash(hash_api_key(issued.key)) is None


@pytest.mark.asyncio
async def test_deactivate_missing_key_is_not_found(key_use_case):
    result = await key_use_case.deactivate_key("missing")

    assert isinstance(result.error, NotFound)
    assert result.error.code == "KEY_NOT_FOUND"


@pytest.mark.asyncio
async def test_expired_key_is_rejected_and_deactivated(key_use_case, uow, clock):
    issued = await key_use_case.generate_api_key("short", expiry_days=1)
    clock.advance(days=1, seconds=1)

    assert await key_use_case.validate_api_key(issued.key) is None

    async with uow:
        stored = await uow.api_keys.get_by_id(issued.id)
    assert stored.is_active is False


@pytest.mark.asyncio
async def test_sixth_key_evicts_exactly_the_oldest(key_use_case, clock):
    issued = []
    for i in range(5):
        issued.append(await key_use_case.generate_api_key(f"key-{i}", user_id="alice"))
        clock.advance(minutes=1)

    sixth = await key_use_case.generate_api_key("key-5", user_id="alice")

    assert await key_use_case.validate_api_key(issued[0].key) is None
    for api_key in issued[1:] + [sixth]:
        assert await key_use_case.validate_api_key(api_key.key) is not None
    user_keys = await key_use_case.get_user_keys("alice")
    assert [k.id for k in user_keys] == [k.id for k in issued[1:]] + [sixth.id]


@pytest.mark.asyncio
async def test_cap_is_configurable(uow, clock):
    use_case = ApiKeyUseCase(uow, KeyRotationSettings(max_active_keys=1), clock=clock)
    first = await use_case.generate_api_key("a", user_id="bob")
    clock.advance(seconds=1)
    second = await use_case.generate_api_key("b", user_id="bob")

    assert await use_case.validate_api_key(first.key) is None
    assert await use_case.validate_api_key(second.key) is not None


@pytest.mark.asyncio
async def test_usage_statistics(key_use_case, clock):
    issued = await key_use_case.generate_api_key("ci")

    await key_use_case.validate_api_key(issued.key)
    result = await key_use_case.record_key_usage(issued.id, success=False)

    assert result.value.request_count == 2
    stats = await key_use_case.get_key_stats(issued.id)
    assert stats.request_count == 2
    assert stats.error_count == 1
    assert stats.last_used == clock.now


@pytest.mark.asyncio
async def test_usage_for_unknown_key_is_not_found(key_use_case):
    result = await key_use_case.record_key_usage("missing")

    assert isinstance(result.error, NotFound)
    assert result.error.code == "KEY_NOT_FOUND"
    stats = await key_use_case.get_key_stats("missing")
    assert stats.request_count == 0
