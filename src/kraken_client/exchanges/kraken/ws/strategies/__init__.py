from .connection import KrakenConnectionStrategy
from .subscription import KrakenPublicSubscriptionStrategy, KrakenPrivateSubscriptionStrategy, TokenProvider
from .message_parser import KrakenMessageParser, base_channel_name

__all__ = [
    'KrakenConnectionStrategy',
    'KrakenPublicSubscriptionStrategy',
    'KrakenPrivateSubscriptionStrategy',
    'TokenProvider',
    'KrakenMessageParser',
    'base_channel_name',
]
