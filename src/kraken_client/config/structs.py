from typing import Optional, Dict
from msgspec import Struct, field


class NetworkConfig(Struct, frozen=True):
    """
    Network configuration settings for the REST transport.

    Attributes:
        request_timeout: Total HTTP request timeout in seconds
        connect_timeout: Connection timeout in seconds
        max_concurrent: Maximum in-flight requests
        keepalive_timeout: Idle keep-alive timeout for pooled connections
        user_agent: User-Agent header value
    """
    request_timeout: float = 30.0
    connect_timeout: float = 5.0
    max_concurrent: int = 10
    keepalive_timeout: float = 60.0
    user_agent: str = "kraken-client/0.1.0"

    def validate(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.max_concurrent <= 0:
            raise ValueError("max_concurrent must be positive")


class RateLimitConfig(Struct, frozen=True):
    """
    Token bucket for one request classification.

    Attributes:
        capacity: Maximum tokens the bucket holds (burst size)
        refill_rate: Tokens restored per second
        cost: Tokens drawn by one call of this classification
    """
    capacity: float
    refill_rate: float
    cost: float = 1.0

    def validate(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")
        if self.refill_rate <= 0:
            raise ValueError("refill_rate must be positive")
        if self.cost <= 0:
            raise ValueError("cost must be positive")
        if self.cost > self.capacity:
            raise ValueError("cost cannot exceed capacity")


# Defaults follow Kraken's starter tier counters
DEFAULT_RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "public": RateLimitConfig(capacity=15, refill_rate=15 / 45, cost=1),
    "private": RateLimitConfig(capacity=20, refill_rate=20 / 60, cost=1),
    "order": RateLimitConfig(capacity=15, refill_rate=15 / 60, cost=2),
}


class WebSocketConfig(Struct, frozen=True):
    """
    WebSocket connection, reconnection and liveness settings.

    Attributes:
        connect_timeout: Opening handshake timeout in seconds
        ping_interval: Transport-level ping interval (None disables)
        ping_timeout: Transport-level pong timeout
        close_timeout: Closing handshake timeout
        auto_reconnect: Reconnect after unexpected disconnects
        reconnect_delay: Backoff floor in seconds
        reconnect_backoff: Backoff multiplier per failed attempt
        max_reconnect_delay: Backoff ceiling in seconds
        reconnect_jitter: Fraction of the delay randomised away (0..1)
        heartbeat_timeout: Silence after which the connection is declared dead
        subscription_timeout: Default wait for subscription acks
        max_message_size: Maximum inbound frame size in bytes
        max_queue_size: Per-subscription delivery queue bound
    """
    connect_timeout: float = 10.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 10.0
    close_timeout: float = 5.0

    auto_reconnect: bool = True
    reconnect_delay: float = 1.0
    reconnect_backoff: float = 2.0
    max_reconnect_delay: float = 60.0
    reconnect_jitter: float = 0.2

    heartbeat_timeout: Optional[float] = 30.0
    subscription_timeout: float = 10.0

    max_message_size: int = 1048576  # 1MB
    max_queue_size: int = 1000

    @property
    def has_heartbeat(self) -> bool:
        return self.heartbeat_timeout is not None and self.heartbeat_timeout > 0

    def validate(self) -> None:
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be positive")
        if self.reconnect_delay < 0:
            raise ValueError("reconnect_delay cannot be negative")
        if self.reconnect_backoff < 1:
            raise ValueError("reconnect_backoff must be >= 1")
        if self.max_reconnect_delay < self.reconnect_delay:
            raise ValueError("max_reconnect_delay must be >= reconnect_delay")
        if not 0 <= self.reconnect_jitter <= 1:
            raise ValueError("reconnect_jitter must be between 0 and 1")
        if self.max_queue_size <= 0:
            raise ValueError("max_queue_size must be positive")


class ExchangeCredentials(Struct, frozen=True):
    """Exchange API credentials. The secret is the base64 text Kraken issues."""
    api_key: str = ""
    secret_key: str = ""

    @property
    def has_private_api(self) -> bool:
        return bool(self.api_key) and bool(self.secret_key)

    def get_preview(self) -> str:
        """Get safe preview of credentials for logging."""
        if not self.api_key:
            return "Not configured"
        if len(self.api_key) > 8:
            return f"{self.api_key[:4]}...{self.api_key[-4:]}"
        return "***"

    def validate(self) -> None:
        # Empty credentials mean public-only mode
        if not self.api_key and not self.secret_key:
            return
        if bool(self.api_key) != bool(self.secret_key):
            raise ValueError("Both api_key and secret_key must be provided together or both empty")

    def __repr__(self) -> str:
        return f"ExchangeCredentials(api_key={self.get_preview()!r}, secret_key='***')"


class ExchangeConfig(Struct, frozen=True):
    """
    Complete client configuration.

    Attributes:
        name: Exchange name used in logger names
        credentials: API credentials (may be empty)
        base_url: REST API base URL
        websocket_url: Public WebSocket URL
        websocket_auth_url: Authenticated WebSocket URL
        network: REST transport settings
        websocket: WebSocket settings
        rate_limits: Token bucket per classification ("public", "private", "order")
    """
    name: str = "kraken"
    credentials: ExchangeCredentials = field(default_factory=ExchangeCredentials)
    base_url: str = "https://api.kraken.com"
    websocket_url: str = "wss://ws.kraken.com"
    websocket_auth_url: str = "wss://ws-auth.kraken.com"
    network: NetworkConfig = field(default_factory=NetworkConfig)
    websocket: WebSocketConfig = field(default_factory=WebSocketConfig)
    rate_limits: Dict[str, RateLimitConfig] = {}

    def has_credentials(self) -> bool:
        return self.credentials.has_private_api

    def is_public_only(self) -> bool:
        return not self.has_credentials()

    def get_rate_limit(self, classification: str) -> RateLimitConfig:
        """Configured bucket for a classification, falling back to the defaults."""
        if classification in self.rate_limits:
            return self.rate_limits[classification]
        return DEFAULT_RATE_LIMITS[classification]

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url is required")
        if not self.websocket_url:
            raise ValueError("websocket_url is required")
        self.credentials.validate()
        self.network.validate()
        self.websocket.validate()
        for name, limit in self.rate_limits.items():
            if name not in DEFAULT_RATE_LIMITS:
                raise ValueError(f"Unknown rate limit classification: {name}")
            limit.validate()
