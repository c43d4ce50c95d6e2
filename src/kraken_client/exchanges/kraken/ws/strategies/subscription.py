"""
Kraken WebSocket Subscription Strategies

Message format:
{
    "event": "subscribe",
    "pair": ["XBT/USD", "ETH/USD"],
    "subscription": {"name": "book", "depth": 10}
}

Private channels carry no pair and add the session token to the
subscription object:
{
    "event": "subscribe",
    "subscription": {"name": "ownTrades", "token": "..."}
}
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from kraken_client.infrastructure.exceptions.exchange import AuthError
from kraken_client.infrastructure.networking.websocket import SubscriptionAction, SubscriptionStrategy
from kraken_client.infrastructure.logging import get_exchange_logger

TokenProvider = Callable[[], Awaitable[str]]

_EVENTS = {
    SubscriptionAction.SUBSCRIBE: "subscribe",
    SubscriptionAction.UNSUBSCRIBE: "unsubscribe",
}


class KrakenPublicSubscriptionStrategy(SubscriptionStrategy):
    """Kraken public channels: ticker, ohlc, trade, spread, book."""

    def create_subscription_message(
        self,
        action: SubscriptionAction,
        channel: str,
        pairs: Sequence[Optional[str]],
        options: Dict[str, Any],
    ) -> Dict[str, Any]:
        message: Dict[str, Any] = {
            "event": _EVENTS[action],
            "subscription": {"name": channel, **options},
        }
        pair_list = [p for p in pairs if p is not None]
        if pair_list:
            message["pair"] = pair_list
        return message

    def create_ping_message(self, reqid: int) -> Optional[Dict[str, Any]]:
        return {"event": "ping", "reqid": reqid}


class KrakenPrivateSubscriptionStrategy(KrakenPublicSubscriptionStrategy):
    """
    Kraken private channels (ownTrades, openOrders).

    The token is fetched through ``token_provider`` before every connect
    attempt, so replayed subscriptions always carry a fresh one.
    """

    def __init__(self, token_provider: TokenProvider, logger=None):
        self._token_provider = token_provider
        self._token: Optional[str] = None
        self.logger = logger or get_exchange_logger('kraken', 'ws.private.subscription')

    async def prepare(self) -> None:
        self._token = await self._token_provider()
        self.logger.debug("WebSocket token refreshed")

    def create_subscription_message(
        self,
        action: SubscriptionAction,
        channel: str,
        pairs: Sequence[Optional[str]],
        options: Dict[str, Any],
    ) -> Dict[str, Any]:
        if self._token is None:
            raise AuthError("No WebSocket token; connect() fetches one")
        message = super().create_subscription_message(action, channel, pairs, options)
        message["subscription"]["token"] = self._token
        return message
