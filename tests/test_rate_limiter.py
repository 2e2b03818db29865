import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from core.domain.errors import CounterStoreUnavailable
from core.domain.models import CounterResult, OperationClass, RateLimitPolicy
from core.interfaces.gateways import ICounterStore
from core.services.rate_limiter import RateLimiter, default_policies, rate_limit_key
from infrastructure.ratelimit import InMemoryCounterStore, RedisCounterStore
from tests.fakes import FakeClock


class BrokenStore(ICounterStore):
    async def increment_and_check(self, key, policy):
        raise CounterStoreUnavailable("down")

    async def ping(self):
        return False

    async def close(self, reason=None):
        pass


def limiter(clock=None, store=None, enabled=True):
    clock = clock or FakeClock()
    return RateLimiter(store or InMemoryCounterStore(clock), enabled=enabled, clock=clock)


def test_default_policies():
    policies = default_policies()
    assert (policies[OperationClass.API].window_seconds, policies[OperationClass.API].max_requests) == (60, 100)
    assert (policies[OperationClass.AUTH].window_seconds, policies[OperationClass.AUTH].max_requests) == (900, 5)
    assert policies[OperationClass.UPLOAD].max_requests == 5
    assert policies[OperationClass.ADMIN].max_requests == 50
    assert policies[OperationClass.MATCHMAKING].max_requests == 10
    assert policies[OperationClass.TOURNAMENT].max_requests == 3
    assert not policies[OperationClass.API].fail_closed
    assert policies[OperationClass.AUTH].fail_closed


def test_key_format():
    assert rate_limit_key(OperationClass.UPLOAD, "user-1") == "ratelimit:upload:user-1"


@pytest.mark.parametrize("operation_class", list(OperationClass))
async def test_limit_admits_exactly_max_requests(operation_class):
    rl = limiter()
    policy = rl.policy_for(operation_class)

    for i in range(policy.max_requests):
        decision = await rl.check("caller", operation_class)
        assert decision.allowed
        assert decision.remaining == policy.max_requests - i - 1

    rejected = await rl.check("caller", operation_class)
    assert not rejected.allowed
    assert rejected.remaining == 0
    assert rejected.reset_at > 0
    assert 1 <= rejected.retry_after <= policy.window_seconds


async def test_window_slides():
    clock = FakeClock()
    rl = limiter(clock)
    for _ in range(3):
        assert (await rl.check("caller", "tournament")).allowed
    assert not (await rl.check("caller", "tournament")).allowed

    clock.advance(60)
    assert (await rl.check("caller", "tournament")).allowed


async def test_rejected_requests_are_not_recorded():
    clock = FakeClock()
    rl = limiter(clock)
    for _ in range(3):
        await rl.check("caller", "tournament")
        clock.advance(10)
    for _ in range(5):
        assert not (await rl.check("caller", "tournament")).allowed

    # the first admission leaves the window; a rejected retry must not extend it
    clock.advance(31)
    assert (await rl.check("caller", "tournament")).allowed


async def test_identifiers_and_classes_are_independent():
    rl = limiter()
    for _ in range(3):
        await rl.check("a", "tournament")
    assert not (await rl.check("a", "tournament")).allowed
    assert (await rl.check("b", "tournament")).allowed
    assert (await rl.check("a", "api")).allowed


async def test_disabled_limiter_admits_everything():
    rl = limiter(enabled=False)
    for _ in range(10):
        assert (await rl.check("caller", "tournament")).allowed


@pytest.mark.parametrize("operation_class", ["auth", "admin", "upload", "matchmaking", "tournament"])
async def test_outage_denies_sensitive_classes(operation_class):
    decision = await limiter(store=BrokenStore()).check("caller", operation_class)
    assert not decision.allowed
    assert decision.degraded
    assert decision.retry_after == 30


async def test_outage_allows_general_api():
    decision = await limiter(store=BrokenStore()).check("caller", "api")
    assert decision.allowed
    assert decision.degraded


async def test_unexpected_store_error_never_raises():
    store = MagicMock(spec=ICounterStore)
    store.increment_and_check = AsyncMock(side_effect=RuntimeError("boom"))
    decision = await limiter(store=store).check("caller", "auth")
    assert not decision.allowed


# === Redis store ===

def redis_with_script(script):
    redis = MagicMock()
    redis.register_script.return_value = script
    return redis


async def test_redis_store_passes_window_in_milliseconds():
    clock = FakeClock(1000.0)
    script = AsyncMock(return_value=[1, 1, 61_000_000])
    store = RedisCounterStore(redis_with_script(script), clock=clock)
    policy = RateLimitPolicy(operation_class=OperationClass.API, window_seconds=60, max_requests=100, fail_closed=False)

    result = await store.increment_and_check("ratelimit:api:x", policy)

    assert result == CounterResult(allowed=True, limit=100, remaining=99, reset_at=61_000.0)
    kwargs = script.await_args.kwargs
    assert kwargs["keys"] == ["ratelimit:api:x"]
    assert kwargs["args"][:3] == [1_000_000, 60_000, 100]


async def test_redis_store_reports_rejection():
    script = AsyncMock(return_value=[0, 5, 1_700_000_900_000])
    store = RedisCounterStore(redis_with_script(script))
    policy = RateLimitPolicy(operation_class=OperationClass.AUTH, window_seconds=900, max_requests=5, fail_closed=True)

    result = await store.increment_and_check("ratelimit:auth:x", policy)
    assert not result.allowed
    assert result.remaining == 0


async def test_redis_errors_become_store_unavailable():
    script = AsyncMock(side_effect=RedisConnectionError("refused"))
    store = RedisCounterStore(redis_with_script(script))
    policy = default_policies()[OperationClass.API]
    with pytest.raises(CounterStoreUnavailable):
        await store.increment_and_check("k", policy)


async def test_redis_timeout_becomes_store_unavailable():
    async def slow(**kwargs):
        await asyncio.sleep(1)

    store = RedisCounterStore(redis_with_script(slow), timeout=0.01)
    with pytest.raises(CounterStoreUnavailable):
        await store.increment_and_check("k", default_policies()[OperationClass.API])


async def test_redis_outage_fails_closed_for_auth_through_limiter():
    script = AsyncMock(side_effect=RedisConnectionError("refused"))
    rl = RateLimiter(RedisCounterStore(redis_with_script(script)), enabled=True)
    assert not (await rl.check("1.2.3.4", "auth")).allowed
    assert (await rl.check("1.2.3.4", "api")).allowed
