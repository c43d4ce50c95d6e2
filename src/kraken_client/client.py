"""
Kraken client facade.

Composes configuration, credentials, nonce generator, rate limiter, the REST
manager and WebSocket sessions behind one object.

Usage:
    async with KrakenClient(load_config()) as client:
        server_time = await client.public.get_server_time()
        balances = await client.private.get_balance()

        session = client.websocket()
        await session.connect()
        ticker = await session.subscribe("ticker", ["XBT/USD"])
"""

from pathlib import Path
from typing import List, Optional, Union

import aiohttp

from kraken_client.config import ConfigManager, ExchangeConfig
from kraken_client.infrastructure.auth import CredentialStore, NonceGenerator
from kraken_client.infrastructure.exceptions.exchange import ConfigurationError, MissingCredentialsError
from kraken_client.infrastructure.logging import configure_logging, get_exchange_logger
from kraken_client.infrastructure.networking.websocket import WebSocketSession
from kraken_client.infrastructure.networking.websocket.ws_session import EventHandler
from kraken_client.exchanges.kraken.rest import KrakenPublicRest, KrakenPrivateRest, create_rest_manager
from kraken_client.exchanges.kraken.rest.strategies import KrakenRateLimit
from kraken_client.exchanges.kraken.ws import create_public_session, create_private_session


class KrakenClient:
    """Entry point for Kraken REST and WebSocket access."""

    def __init__(self, config: Optional[ExchangeConfig] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.config = config or ExchangeConfig()
        try:
            self.config.validate()
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self.logger = get_exchange_logger(self.config.name, 'client')

        self.credentials = CredentialStore.from_config(self.config.credentials)
        self.nonce_generator = NonceGenerator()
        self.rate_limiter = KrakenRateLimit(self.config)
        self.rest_manager = create_rest_manager(
            self.config,
            credentials=self.credentials,
            nonce_generator=self.nonce_generator,
            rate_limiter=self.rate_limiter,
            session=session,
        )

        self.public = KrakenPublicRest(self.rest_manager)
        self.private = KrakenPrivateRest(self.rest_manager)

        self._sessions: List[WebSocketSession] = []

        self.logger.info("Kraken client created",
                         base_url=self.config.base_url,
                         credentials=self.credentials.get_preview())

    @classmethod
    def from_config_file(cls, config_path: Optional[Union[str, Path]] = None,
                         env_path: Optional[Union[str, Path]] = None) -> "KrakenClient":
        """Load the YAML file, install its logging section and build a client."""
        manager = ConfigManager(config_path, env_path)
        config = manager.load()
        configure_logging(manager.get_logging_config())
        return cls(config)

    @property
    def has_credentials(self) -> bool:
        return self.credentials.has_credentials

    def websocket(self, event_handler: Optional[EventHandler] = None) -> WebSocketSession:
        """New session on the public endpoint. Call ``connect()`` on it to start."""
        session = create_public_session(self.config, event_handler)
        self._sessions.append(session)
        return session

    def private_websocket(self, event_handler: Optional[EventHandler] = None) -> WebSocketSession:
        """
        New session on the authenticated endpoint.

        A token is requested over REST before every (re)connect.

        Raises:
            MissingCredentialsError: if the client has no credentials
        """
        if not self.has_credentials:
            raise MissingCredentialsError("Private WebSocket requires API credentials")

        async def token_provider() -> str:
            token = await self.private.get_websockets_token()
            return token.token

        session = create_private_session(self.config, token_provider, event_handler)
        self._sessions.append(session)
        return session

    async def close(self) -> None:
        for session in self._sessions:
            await session.close()
        self._sessions.clear()
        await self.rest_manager.close()
        self.logger.debug("Kraken client closed")

    async def __aenter__(self) -> "KrakenClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
