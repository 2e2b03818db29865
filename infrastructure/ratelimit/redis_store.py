"""
Redis-backed sliding window counters.

One Lua script does prune + count + conditional add + expiry, so the
check is atomic across concurrent requests and app instances.
Timestamps are epoch milliseconds stored as sorted-set scores.
"""

import asyncio
import logging
import time
from typing import Callable, Optional
from uuid import uuid4

from redis.asyncio import Redis
from redis.exceptions import RedisError

from core.domain.errors import CounterStoreUnavailable
from core.domain.models import CounterResult, RateLimitPolicy
from core.interfaces.gateways import ICounterStore

logger = logging.getLogger(__name__)

SLIDING_WINDOW_LUA = """
local key = KEYS[1]
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])
local member = ARGV[4]

redis.call('ZREMRANGEBYSCORE', key, '-inf', now - window)
local count = redis.call('ZCARD', key)
local allowed = 0
if count < limit then
    redis.call('ZADD', key, now, member)
    count = count + 1
    allowed = 1
end
redis.call('PEXPIRE', key, window)

local reset = now + window
local oldest = redis.call('ZRANGE', key, 0, 0, 'WITHSCORES')
if oldest[2] then
    reset = tonumber(oldest[2]) + window
end
return {allowed, count, reset}
"""


def create_redis_client(url: str, timeout: float = 10.0) -> Redis:
    return Redis.from_url(
        url,
        decode_responses=True,
        encoding="utf-8",
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )


class RedisCounterStore(ICounterStore):
    """Shared counter store for every app instance"""

    def __init__(self, redis: Redis, timeout: float = 10.0, clock: Callable[[], float] = time.time):
        self.redis = redis
        self.timeout = timeout
        self.clock = clock
        self._script = redis.register_script(SLIDING_WINDOW_LUA)

    async def increment_and_check(self, key: str, policy: RateLimitPolicy) -> CounterResult:
        now_ms = int(self.clock() * 1000)
        window_ms = policy.window_seconds * 1000
        member = f"{now_ms}-{uuid4().hex}"

        try:
            allowed, count, reset_ms = await asyncio.wait_for(
                self._script(keys=[key], args=[now_ms, window_ms, policy.max_requests, member]),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise CounterStoreUnavailable(f"Redis timed out after {self.timeout}s") from e
        except RedisError as e:
            raise CounterStoreUnavailable(f"Redis error: {e}") from e

        return CounterResult(
            allowed=bool(int(allowed)),
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - int(count)),
            reset_at=int(reset_ms) / 1000,
        )

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self.redis.ping(), timeout=self.timeout))
        except (asyncio.TimeoutError, RedisError) as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self, reason: Optional[str] = None) -> None:
        await self.redis.aclose()
        logger.info(f"Redis connection closed{': ' + reason if reason else ''}")
