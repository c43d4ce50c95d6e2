from typing import Optional

from kraken_client.config.structs import ExchangeConfig
from kraken_client.infrastructure.networking.websocket import WebSocketSession
from kraken_client.infrastructure.networking.websocket.ws_session import EventHandler
from kraken_client.infrastructure.logging import get_exchange_logger
from .strategies import (
    KrakenConnectionStrategy,
    KrakenPublicSubscriptionStrategy,
    KrakenPrivateSubscriptionStrategy,
    KrakenMessageParser,
    TokenProvider,
)


def create_public_session(exchange_config: ExchangeConfig,
                          event_handler: Optional[EventHandler] = None) -> WebSocketSession:
    """Session on the public endpoint (market data channels)."""
    return WebSocketSession(
        config=exchange_config.websocket,
        connection_strategy=KrakenConnectionStrategy(exchange_config, exchange_config.websocket_url),
        subscription_strategy=KrakenPublicSubscriptionStrategy(),
        message_parser=KrakenMessageParser(),
        event_handler=event_handler,
        logger=get_exchange_logger(exchange_config.name, 'ws.public'),
        name="public",
    )


def create_private_session(exchange_config: ExchangeConfig,
                           token_provider: TokenProvider,
                           event_handler: Optional[EventHandler] = None) -> WebSocketSession:
    """Session on the authenticated endpoint; subscribe frames carry a fresh token."""
    return WebSocketSession(
        config=exchange_config.websocket,
        connection_strategy=KrakenConnectionStrategy(exchange_config, exchange_config.websocket_auth_url),
        subscription_strategy=KrakenPrivateSubscriptionStrategy(token_provider),
        message_parser=KrakenMessageParser(),
        event_handler=event_handler,
        logger=get_exchange_logger(exchange_config.name, 'ws.private'),
        name="private",
    )
