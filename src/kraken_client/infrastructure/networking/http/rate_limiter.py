"""
Token bucket admission control.

One bucket per request classification, continuous refill. A caller that finds
its bucket short sleeps once for exactly the computed deficit while holding the
bucket lock, so waiters are served in arrival order and nobody polls.
"""

import asyncio
import time
from typing import Awaitable, Callable, Dict, Mapping, Optional

from .structs import ApiClassification
from .strategies.rate_limit import RateLimitStrategy

# Float slack for refill arithmetic after an exact-deficit sleep
_EPSILON = 1e-9


class TokenBucket:
    """
    Token bucket with continuous refill.

    Time Complexity: O(1) for refill and acquisition
    """

    def __init__(self, capacity: float, refill_rate: float, cost: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        if capacity <= 0 or refill_rate <= 0:
            raise ValueError("capacity and refill_rate must be positive")
        if not 0 < cost <= capacity:
            raise ValueError("cost must be positive and not exceed capacity")

        self.capacity = float(capacity)
        self.refill_rate = float(refill_rate)
        self.cost = float(cost)
        self._clock = clock
        self.tokens = float(capacity)
        self.last_refill = clock()
        self.lock = asyncio.Lock()

        self.admitted = 0
        self.delayed = 0
        self.total_wait = 0.0

    def refill(self) -> None:
        now = self._clock()
        elapsed = now - self.last_refill
        if elapsed > 0:
            self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
            self.last_refill = now

    def try_acquire(self) -> bool:
        """Deduct one call's cost if available right now."""
        self.refill()
        if self.tokens + _EPSILON >= self.cost:
            self.tokens = max(0.0, self.tokens - self.cost)
            self.admitted += 1
            return True
        return False

    def time_until_available(self) -> float:
        """Seconds until one call's cost has accrued (0 if available now)."""
        deficit = self.cost - self.tokens
        if deficit <= 0:
            return 0.0
        return deficit / self.refill_rate


class TokenBucketRateLimiter(RateLimitStrategy):
    """
    Cost-weighted rate limiter with an independent bucket per classification.

    Args:
        limits: Mapping of classification to (capacity, refill_rate, cost) holders;
            any object with those three attributes works (e.g. RateLimitConfig)
        clock: Monotonic clock in seconds
        sleep: Coroutine used to wait; injectable for deterministic tests
    """

    def __init__(self, limits: Mapping[ApiClassification, object],
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None,
                 logger=None):
        self._clock = clock
        self._sleep = sleep or asyncio.sleep
        self.logger = logger
        self._buckets: Dict[ApiClassification, TokenBucket] = {
            classification: TokenBucket(limit.capacity, limit.refill_rate, limit.cost, clock)
            for classification, limit in limits.items()
        }

    def _bucket(self, classification: ApiClassification) -> TokenBucket:
        try:
            return self._buckets[classification]
        except KeyError:
            raise ValueError(f"No rate limit configured for {classification}") from None

    def cost(self, classification: ApiClassification) -> float:
        return self._bucket(classification).cost

    async def admit(self, classification: ApiClassification) -> None:
        bucket = self._bucket(classification)
        async with bucket.lock:
            waited = 0.0
            while not bucket.try_acquire():
                delay = bucket.time_until_available()
                if self.logger and waited == 0.0:
                    self.logger.debug("Rate limit wait",
                                      classification=classification.value,
                                      delay_seconds=round(delay, 4),
                                      tokens=round(bucket.tokens, 4))
                await self._sleep(delay)
                waited += delay

            if waited:
                bucket.delayed += 1
                bucket.total_wait += waited
                if self.logger:
                    self.logger.metric("rest_rate_limit_wait_ms", waited * 1000,
                                       classification=classification.value)

    def available_tokens(self, classification: ApiClassification) -> float:
        bucket = self._bucket(classification)
        bucket.refill()
        return bucket.tokens

    def get_stats(self) -> Dict[str, Dict[str, float]]:
        stats = {}
        for classification, bucket in self._buckets.items():
            bucket.refill()
            stats[classification.value] = {
                "capacity": bucket.capacity,
                "tokens": bucket.tokens,
                "refill_rate": bucket.refill_rate,
                "cost": bucket.cost,
                "admitted": bucket.admitted,
                "delayed": bucket.delayed,
                "total_wait_seconds": bucket.total_wait,
                "waiting": bucket.lock.locked(),
            }
        return stats
