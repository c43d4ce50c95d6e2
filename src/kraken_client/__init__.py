"""
Asyncio client for the Kraken spot REST API and v1 WebSocket API.

    from kraken_client import KrakenClient

    async with KrakenClient.from_config_file() as client:
        print(await client.public.get_server_time())
"""

from .client import KrakenClient
from .config import ExchangeConfig, ExchangeCredentials, load_config
from .infrastructure.auth import CredentialStore, NonceGenerator
from .infrastructure.networking.http import ApiClassification, RequestSpec
from .infrastructure.networking.websocket import (
    SessionEvent,
    SessionEventType,
    StreamMessage,
    SubscriptionHandle,
    SubscriptionStatus,
    WebSocketSession,
)
from .infrastructure.exceptions import *  # noqa: F401,F403
from .infrastructure.exceptions import __all__ as _exception_names

__version__ = "0.1.0"

__all__ = [
    'KrakenClient',
    'ExchangeConfig',
    'ExchangeCredentials',
    'load_config',
    'CredentialStore',
    'NonceGenerator',
    'ApiClassification',
    'RequestSpec',
    'SessionEvent',
    'SessionEventType',
    'StreamMessage',
    'SubscriptionHandle',
    'SubscriptionStatus',
    'WebSocketSession',
    *_exception_names,
]
