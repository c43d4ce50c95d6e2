from typing import Optional

import aiohttp

from kraken_client.config.structs import ExchangeConfig
from kraken_client.infrastructure.auth import CredentialStore, NonceGenerator
from kraken_client.infrastructure.networking.http import RestManager, RestStrategySet, RateLimitStrategy
from kraken_client.infrastructure.logging import get_exchange_logger
from .strategies import (
    KrakenRequestStrategy, KrakenAuthStrategy, KrakenExceptionHandlerStrategy, KrakenRateLimit
)


def create_rest_manager(
    exchange_config: ExchangeConfig,
    credentials: Optional[CredentialStore] = None,
    nonce_generator: Optional[NonceGenerator] = None,
    rate_limiter: Optional[RateLimitStrategy] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> RestManager:
    """
    Compose a RestManager from Kraken strategies.

    The auth strategy is attached only when credentials are present, so a
    public-only manager fails private calls with MissingCredentialsError.
    """
    credentials = credentials or CredentialStore.from_config(exchange_config.credentials)

    auth_strategy = None
    if credentials.has_credentials:
        auth_strategy = KrakenAuthStrategy(credentials, nonce_generator or NonceGenerator())

    strategy_set = RestStrategySet(
        request_strategy=KrakenRequestStrategy(exchange_config),
        rate_limit_strategy=rate_limiter or KrakenRateLimit(exchange_config),
        exception_handler_strategy=KrakenExceptionHandlerStrategy(),
        auth_strategy=auth_strategy,
    )

    return RestManager(strategy_set, session=session,
                       logger=get_exchange_logger(exchange_config.name, 'rest'))
