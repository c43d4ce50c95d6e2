from .structs import (
    ConnectionState,
    ConnectionContext,
    MessageType,
    ParsedMessage,
    SessionEvent,
    SessionEventType,
    SessionMetrics,
    StreamMessage,
    Subscription,
    SubscriptionAction,
    SubscriptionKey,
    SubscriptionStatus,
)
from .reconnection import ReconnectionPolicy
from .strategies import ConnectionStrategy, SubscriptionStrategy, MessageParser
from .ws_session import WebSocketSession, SubscriptionHandle

__all__ = [
    'ConnectionState',
    'ConnectionContext',
    'MessageType',
    'ParsedMessage',
    'SessionEvent',
    'SessionEventType',
    'SessionMetrics',
    'StreamMessage',
    'Subscription',
    'SubscriptionAction',
    'SubscriptionKey',
    'SubscriptionStatus',
    'ReconnectionPolicy',
    'ConnectionStrategy',
    'SubscriptionStrategy',
    'MessageParser',
    'WebSocketSession',
    'SubscriptionHandle',
]
