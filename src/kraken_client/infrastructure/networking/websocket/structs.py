import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple


# (subscription name, pair); pair is None for account-level channels
SubscriptionKey = Tuple[str, Optional[str]]


class ConnectionState(Enum):
    """WebSocket connection states"""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class SubscriptionStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    FAILED = "failed"
    UNSUBSCRIBED = "unsubscribed"


class SubscriptionAction(IntEnum):
    """WebSocket subscription actions."""
    SUBSCRIBE = 1
    UNSUBSCRIBE = 2


class MessageType(IntEnum):
    """Inbound frame classification for routing."""
    DATA = 1
    SUBSCRIPTION_STATUS = 2
    HEARTBEAT = 3
    SYSTEM_STATUS = 4
    PONG = 5
    ERROR = -1
    UNKNOWN = -999


@dataclass(frozen=True)
class ConnectionContext:
    """Connection configuration for WebSocket strategies."""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    open_timeout: float = 10.0
    ping_interval: Optional[float] = 20.0
    ping_timeout: Optional[float] = 10.0
    close_timeout: float = 5.0
    max_size: int = 1048576


@dataclass
class ParsedMessage:
    """
    Parsed inbound frame with routing information.

    For DATA frames ``data`` holds the payload (a single element, or a list
    when the venue split it over several array slots). For SUBSCRIPTION_STATUS
    ``status`` is the venue's status string and ``error_message`` its reason.
    """
    message_type: MessageType
    channel_name: Optional[str] = None
    subscription_name: Optional[str] = None
    pair: Optional[str] = None
    channel_id: Optional[int] = None
    status: Optional[str] = None
    error_message: Optional[str] = None
    reqid: Optional[int] = None
    sequence: Optional[int] = None
    data: Any = None
    raw_data: Any = None
    timestamp: float = 0.0

    def __post_init__(self):
        if self.timestamp == 0.0:
            self.timestamp = time.time()


@dataclass
class Subscription:
    """One channel+pair subscription tracked by a session."""
    channel_name: str
    pair: Optional[str]
    status: SubscriptionStatus = SubscriptionStatus.UNSUBSCRIBED
    channel_id: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def key(self) -> SubscriptionKey:
        return (self.channel_name, self.pair)

    @property
    def id(self) -> str:
        return f"{self.channel_name}:{self.pair}" if self.pair else self.channel_name


@dataclass(frozen=True)
class StreamMessage:
    """A data frame delivered to a subscription handle."""
    channel_name: str
    pair: Optional[str]
    data: Any
    channel_id: Optional[int] = None
    sequence: Optional[int] = None
    received_at: float = 0.0


class SessionEventType(Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    RECONNECT_FAILED = "reconnect_failed"
    HEARTBEAT_TIMEOUT = "heartbeat_timeout"
    SUBSCRIPTION_FAILED = "subscription_failed"
    UNKNOWN_SUBSCRIPTION = "unknown_subscription"
    PROTOCOL_ERROR = "protocol_error"
    VENUE_ERROR = "venue_error"
    SYSTEM_STATUS = "system_status"


@dataclass(frozen=True)
class SessionEvent:
    """Out-of-band notification from a WebSocket session."""
    event_type: SessionEventType
    error: Optional[Exception] = None
    attempt: Optional[int] = None
    delay: Optional[float] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


@dataclass
class SessionMetrics:
    messages_received: int = 0
    messages_routed: int = 0
    messages_dropped: int = 0
    unknown_frames: int = 0
    protocol_errors: int = 0
    connections: int = 0
    reconnect_attempts: int = 0
    heartbeat_timeouts: int = 0
