import random
from dataclasses import dataclass
from typing import Callable

from kraken_client.config.structs import WebSocketConfig


@dataclass(frozen=True)
class ReconnectionPolicy:
    """
    Exponential backoff with jitter; attempts are unbounded.

    delay(n) = min(initial_delay * backoff_factor ** n, max_delay), then up to
    ``jitter`` of it is randomly removed so reconnecting clients spread out.
    """
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 60.0
    jitter: float = 0.2

    @classmethod
    def from_config(cls, config: WebSocketConfig) -> "ReconnectionPolicy":
        return cls(
            initial_delay=config.reconnect_delay,
            backoff_factor=config.reconnect_backoff,
            max_delay=config.max_reconnect_delay,
            jitter=config.reconnect_jitter,
        )

    def calculate_delay(self, attempt: int, rng: Callable[[], float] = random.random) -> float:
        """Delay before reconnect attempt ``attempt`` (0-based)."""
        try:
            delay = self.initial_delay * (self.backoff_factor ** attempt)
        except OverflowError:
            delay = self.max_delay
        delay = min(delay, self.max_delay)
        return delay * (1.0 - self.jitter * rng())
