from typing import Any, Optional

import websockets

from kraken_client.config.structs import ExchangeConfig
from kraken_client.infrastructure.networking.websocket import (
    ConnectionStrategy, ConnectionContext, ReconnectionPolicy
)
from kraken_client.infrastructure.logging import get_exchange_logger


class KrakenConnectionStrategy(ConnectionStrategy):
    """
    Kraken WebSocket connection strategy.

    Transport-level ping/pong is left to the websockets library; Kraken's
    own heartbeat frames feed the session watchdog.
    """

    def __init__(self, exchange_config: ExchangeConfig, url: Optional[str] = None, logger=None):
        self.exchange_config = exchange_config
        self.url = url or exchange_config.websocket_url
        self.logger = logger or get_exchange_logger('kraken', 'ws.connection')

    def create_connection_context(self) -> ConnectionContext:
        ws = self.exchange_config.websocket
        return ConnectionContext(
            url=self.url,
            open_timeout=ws.connect_timeout,
            ping_interval=ws.ping_interval,
            ping_timeout=ws.ping_timeout,
            close_timeout=ws.close_timeout,
            max_size=ws.max_message_size,
        )

    async def connect(self) -> Any:
        context = self.create_connection_context()
        self.logger.debug("Opening WebSocket connection", url=context.url)
        return await websockets.connect(
            context.url,
            open_timeout=context.open_timeout,
            ping_interval=context.ping_interval,
            ping_timeout=context.ping_timeout,
            close_timeout=context.close_timeout,
            max_size=context.max_size,
            # Kraken frames are small; compression only costs CPU
            compression=None,
        )

    def get_reconnection_policy(self) -> ReconnectionPolicy:
        return ReconnectionPolicy.from_config(self.exchange_config.websocket)
