"""
Kraken private account and trading endpoints.

Account queries draw from the private bucket; order placement and
cancellation draw from the order bucket. Order payloads are opaque mappings
of Kraken's own field names.
"""

from typing import Any, Dict, Iterable, Optional, Union

from kraken_client.infrastructure.logging import HFTLoggerInterface, get_exchange_logger
from kraken_client.infrastructure.networking.http import RestManager, RequestSpec, ApiClassification
from ..structs import WebSocketsToken


def _ids(value: Union[str, Iterable[str]]) -> str:
    return value if isinstance(value, str) else ",".join(value)


class KrakenPrivateRest:
    """Signed REST endpoints. Order actions leave an audit record."""

    def __init__(self, rest_manager: RestManager, logger: Optional[HFTLoggerInterface] = None):
        self._rest = rest_manager
        self.logger = logger or get_exchange_logger('kraken', 'rest.private')

    async def _private(self, path: str, params: Optional[Dict[str, Any]] = None,
                       classification: ApiClassification = ApiClassification.PRIVATE,
                       response_type: Optional[Any] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.private_call(path, params, classification, response_type)
        )

    # Account data

    async def get_balance(self) -> Any:
        return await self._private("/0/private/Balance")

    async def get_trade_balance(self, asset: Optional[str] = None) -> Any:
        return await self._private("/0/private/TradeBalance", {"asset": asset})

    async def get_open_orders(self, trades: bool = False, userref: Optional[int] = None) -> Any:
        return await self._private("/0/private/OpenOrders", {"trades": trades, "userref": userref})

    async def get_closed_orders(self, **filters: Any) -> Any:
        return await self._private("/0/private/ClosedOrders", filters)

    async def query_orders(self, txid: Union[str, Iterable[str]], trades: bool = False) -> Any:
        return await self._private("/0/private/QueryOrders", {"txid": _ids(txid), "trades": trades})

    async def get_trades_history(self, **filters: Any) -> Any:
        return await self._private("/0/private/TradesHistory", filters)

    async def query_trades(self, txid: Union[str, Iterable[str]], trades: bool = False) -> Any:
        return await self._private("/0/private/QueryTrades", {"txid": _ids(txid), "trades": trades})

    async def get_ledgers(self, **filters: Any) -> Any:
        return await self._private("/0/private/Ledgers", filters)

    # Trading

    async def add_order(self, pair: str, side: str, order_type: str, volume: Union[str, float],
                        **order_fields: Any) -> Any:
        """
        Place an order.

        Args:
            pair: Asset pair, e.g. "XBTUSD"
            side: "buy" or "sell"
            order_type: "market", "limit", ...
            volume: Order volume in base currency
            **order_fields: Any further AddOrder fields (price, leverage, oflags, validate, ...)
        """
        params = {"pair": pair, "type": side, "ordertype": order_type, "volume": volume}
        params.update(order_fields)
        result = await self._private("/0/private/AddOrder", params, ApiClassification.ORDER)
        self.logger.audit("Order submitted",
                          pair=pair,
                          side=side,
                          order_type=order_type,
                          volume=str(volume),
                          txid=result.get("txid") if isinstance(result, dict) else None)
        return result

    async def cancel_order(self, txid: str) -> Any:
        result = await self._private("/0/private/CancelOrder", {"txid": txid}, ApiClassification.ORDER)
        self.logger.audit("Order cancelled", txid=txid)
        return result

    async def cancel_all_orders(self) -> Any:
        result = await self._private("/0/private/CancelAll", classification=ApiClassification.ORDER)
        self.logger.audit("All orders cancelled",
                          count=result.get("count") if isinstance(result, dict) else None)
        return result

    # Streaming

    async def get_websockets_token(self) -> WebSocketsToken:
        """Token for subscribing to private WebSocket channels."""
        return await self._private("/0/private/GetWebSocketsToken", response_type=WebSocketsToken)
