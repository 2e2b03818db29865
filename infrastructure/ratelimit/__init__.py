from infrastructure.ratelimit.redis_store import RedisCounterStore, create_redis_client
from infrastructure.ratelimit.memory_store import InMemoryCounterStore

__all__ = [
    "RedisCounterStore",
    "create_redis_client",
    "InMemoryCounterStore",
]
