"""
Rate limiter - sliding-window admission per (operation class, identifier).

The counter store is the source of truth. When it cannot answer, each
operation class falls back to its own fail-open / fail-closed policy.
"""

import logging
import math
import time
from typing import Callable, Dict, Optional, Union

from config.features import features
from core.domain.constants import RATE_LIMIT_OUTAGE_RETRY_SECONDS, RATE_LIMIT_POLICIES
from core.domain.models import OperationClass, RateLimitDecision, RateLimitPolicy
from core.interfaces.gateways import ICounterStore

logger = logging.getLogger(__name__)


def default_policies() -> Dict[OperationClass, RateLimitPolicy]:
    return {
        OperationClass(name): RateLimitPolicy(
            operation_class=OperationClass(name),
            window_seconds=window,
            max_requests=max_requests,
            fail_closed=fail_closed,
        )
        for name, (window, max_requests, fail_closed) in RATE_LIMIT_POLICIES.items()
    }


def rate_limit_key(operation_class: OperationClass, identifier: str) -> str:
    return f"ratelimit:{operation_class.value}:{identifier}"


class RateLimiter:
    """Applies per-class policies on top of an ICounterStore"""

    def __init__(
        self,
        store: ICounterStore,
        policies: Optional[Dict[OperationClass, RateLimitPolicy]] = None,
        enabled: Optional[bool] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.policies = policies or default_policies()
        self.enabled = features.RATE_LIMITING_ENABLED if enabled is None else enabled
        self.clock = clock

    def policy_for(self, operation_class: Union[OperationClass, str]) -> RateLimitPolicy:
        return self.policies[OperationClass(operation_class)]

    async def check(self, identifier: str, operation_class: Union[OperationClass, str]) -> RateLimitDecision:
        """
        Record-and-admit or reject one request. Never raises: a store
        failure resolves to the class's outage policy.
        """
        policy = self.policy_for(operation_class)
        now = self.clock()

        if not self.enabled:
            return RateLimitDecision(
                allowed=True,
                limit=policy.max_requests,
                remaining=policy.max_requests,
                reset_at=now + policy.window_seconds,
            )

        key = rate_limit_key(policy.operation_class, identifier)
        try:
            result = await self.store.increment_and_check(key, policy)
        except Exception as e:
            return self._outage_decision(policy, key, now, e)

        retry_after = 0
        if not result.allowed:
            retry_after = max(1, math.ceil(result.reset_at - now))
            logger.warning(
                f"[RATE_LIMIT] {policy.operation_class.value} limit hit for {identifier} "
                f"({policy.max_requests}/{policy.window_seconds}s), retry in {retry_after}s"
            )

        return RateLimitDecision(
            allowed=result.allowed,
            limit=result.limit,
            remaining=result.remaining,
            reset_at=result.reset_at,
            retry_after=retry_after,
        )

    def _outage_decision(self, policy: RateLimitPolicy, key: str, now: float, error: Exception) -> RateLimitDecision:
        if policy.fail_closed:
            logger.error(f"[RATE_LIMIT] Counter store unavailable for {key}, denying: {error}")
            return RateLimitDecision(
                allowed=False,
                limit=policy.max_requests,
                remaining=0,
                reset_at=now + RATE_LIMIT_OUTAGE_RETRY_SECONDS,
                retry_after=RATE_LIMIT_OUTAGE_RETRY_SECONDS,
                degraded=True,
            )

        logger.warning(f"[RATE_LIMIT] Counter store unavailable for {key}, allowing: {error}")
        return RateLimitDecision(
            allowed=True,
            limit=policy.max_requests,
            remaining=policy.max_requests,
            reset_at=now + policy.window_seconds,
            degraded=True,
        )
