"""
In-process sliding window counters: per-key list of timestamps.
Local development and tests only; state is not shared between processes.
"""

import time
from collections import defaultdict
from typing import Callable, Dict, List

from core.domain.models import CounterResult, RateLimitPolicy
from core.interfaces.gateways import ICounterStore


class InMemoryCounterStore(ICounterStore):
    """
    Same semantics as the Redis script: an entry exactly one window old has
    expired, and rejected requests are not recorded.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        # {key: [timestamp, timestamp, ...]}
        self._requests: Dict[str, List[float]] = defaultdict(list)

    def _cleanup(self, key: str, now: float, window: float):
        """Remove expired timestamps."""
        cutoff = now - window
        self._requests[key] = [ts for ts in self._requests[key] if ts > cutoff]

    async def increment_and_check(self, key: str, policy: RateLimitPolicy) -> CounterResult:
        now = self.clock()
        self._cleanup(key, now, policy.window_seconds)
        timestamps = self._requests[key]

        allowed = len(timestamps) < policy.max_requests
        if allowed:
            timestamps.append(now)

        reset_at = (timestamps[0] if timestamps else now) + policy.window_seconds
        return CounterResult(
            allowed=allowed,
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - len(timestamps)),
            reset_at=reset_at,
        )

    async def ping(self) -> bool:
        return True

    async def close(self, reason=None) -> None:
        self._requests.clear()
