import pytest

from kraken_client.config import WebSocketConfig
from kraken_client.infrastructure.networking.websocket import ReconnectionPolicy


class TestReconnectionPolicy:

    def test_exponential_growth_without_jitter(self):
        policy = ReconnectionPolicy(initial_delay=1.0, backoff_factor=2.0, max_delay=60.0, jitter=0.0)
        delays = [policy.calculate_delay(attempt) for attempt in range(8)]
        assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 32.0, 60.0, 60.0]

    def test_jitter_only_shortens(self):
        policy = ReconnectionPolicy(initial_delay=1.0, backoff_factor=2.0, max_delay=60.0, jitter=0.25)
        assert policy.calculate_delay(3, rng=lambda: 0.0) == 8.0
        assert policy.calculate_delay(3, rng=lambda: 1.0) == pytest.approx(6.0)
        assert policy.calculate_delay(10, rng=lambda: 0.5) == pytest.approx(60.0 * 0.875)

    def test_huge_attempt_is_capped(self):
        policy = ReconnectionPolicy(initial_delay=1.0, backoff_factor=10.0, max_delay=30.0, jitter=0.0)
        assert policy.calculate_delay(10_000) == 30.0

    def test_from_config(self):
        config = WebSocketConfig(reconnect_delay=0.5, reconnect_backoff=3.0,
                                 max_reconnect_delay=10.0, reconnect_jitter=0.1)
        assert ReconnectionPolicy.from_config(config) == ReconnectionPolicy(0.5, 3.0, 10.0, 0.1)
