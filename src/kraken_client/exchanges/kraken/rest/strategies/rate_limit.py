import time
from typing import Awaitable, Callable, Optional

from kraken_client.config.structs import ExchangeConfig
from kraken_client.infrastructure.networking.http import TokenBucketRateLimiter, ApiClassification
from kraken_client.infrastructure.logging import get_exchange_logger


class KrakenRateLimit(TokenBucketRateLimiter):
    """
    Kraken admission control built from the configured buckets.

    Each classification falls back to Kraken's starter tier counter when
    the config leaves it out.
    """

    def __init__(self, exchange_config: ExchangeConfig,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None,
                 logger=None):
        limits = {
            classification: exchange_config.get_rate_limit(classification.value)
            for classification in ApiClassification
        }
        super().__init__(limits, clock=clock, sleep=sleep,
                         logger=logger or get_exchange_logger('kraken', 'rest.rate_limit'))
