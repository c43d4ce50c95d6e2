#!/usr/bin/env python3
"""
Public market data demo: REST snapshot followed by a live ticker and book stream.

Run from the repository root:
    python src/examples/kraken_public_stream.py --pairs XBT/USD ETH/USD --seconds 30
"""

import argparse
import asyncio

from kraken_client import KrakenClient, SessionEvent, WsError
from kraken_client.infrastructure.logging import get_logger

LOGGER_NAME = "examples.public_stream"


async def on_event(event: SessionEvent) -> None:
    logger = get_logger(LOGGER_NAME)
    logger.info("Session event",
                event_type=event.event_type.value,
                attempt=event.attempt,
                error=str(event.error) if event.error else None)


async def consume(handle, seconds: float) -> int:
    logger = get_logger(LOGGER_NAME)
    received = 0
    loop = asyncio.get_running_loop()
    deadline = loop.time() + seconds
    while loop.time() < deadline:
        try:
            message = await handle.get(timeout=max(deadline - loop.time(), 0.1))
        except WsError as e:
            logger.warning("Stream stopped", channel=handle.channel, error=str(e))
            break
        received += 1
        logger.info("Update", channel=message.channel_name, pair=message.pair)
    return received


async def main(pairs, seconds: float) -> None:
    async with KrakenClient.from_config_file() as client:
        logger = get_logger(LOGGER_NAME)
        server_time = await client.public.get_server_time()
        status = await client.public.get_system_status()
        logger.info("Kraken reachable", server_time=server_time.unixtime, status=status.status)

        session = client.websocket(event_handler=on_event)
        await session.connect()

        ticker = await session.subscribe("ticker", pairs)
        book = await session.subscribe("book", pairs, depth=10)
        await ticker.wait_active()
        await book.wait_active()

        counts = await asyncio.gather(consume(ticker, seconds), consume(book, seconds))
        logger.info("Done", ticker_updates=counts[0], book_updates=counts[1],
                    dropped=session.metrics.messages_dropped)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Kraken public stream demo")
    parser.add_argument("--pairs", nargs="+", default=["XBT/USD"])
    parser.add_argument("--seconds", type=float, default=15.0)
    args = parser.parse_args()
    asyncio.run(main(args.pairs, args.seconds))
