#!/usr/bin/env python3
"""
Private account demo: balances over REST, then the ownTrades and openOrders feeds.

Needs KRAKEN_API_KEY and KRAKEN_SECRET_KEY (environment or .env) referenced
from config.yaml.
"""

import asyncio

from kraken_client import KrakenClient, KrakenClientError
from kraken_client.infrastructure.logging import get_logger

LOGGER_NAME = "examples.private_account"


async def main() -> None:
    async with KrakenClient.from_config_file() as client:
        logger = get_logger(LOGGER_NAME)
        if not client.has_credentials:
            logger.error("No API credentials configured")
            return

        try:
            balances = await client.private.get_balance()
        except KrakenClientError as e:
            logger.error("Balance request failed", error_type=type(e).__name__, error=str(e))
            return
        logger.info("Balances", assets=sorted(balances))

        session = client.private_websocket()
        await session.connect()
        trades = await session.subscribe("ownTrades")
        orders = await session.subscribe("openOrders")
        await trades.wait_active()
        await orders.wait_active()

        async for message in orders:
            logger.info("Open orders update", sequence=message.sequence, orders=len(message.data))


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
