"""
Kraken public market data endpoints.

Thin request builders over RestManager; results are returned as decoded JSON.
"""

from typing import Any, Iterable, Optional, Union

from kraken_client.infrastructure.networking.http import RestManager, RequestSpec
from ..structs import ServerTime, SystemStatus


def _pairs(pair: Union[str, Iterable[str], None]) -> Optional[str]:
    if pair is None or isinstance(pair, str):
        return pair
    return ",".join(pair)


class KrakenPublicRest:
    """Unauthenticated REST endpoints; all draw from the public rate bucket."""

    def __init__(self, rest_manager: RestManager):
        self._rest = rest_manager

    async def get_server_time(self) -> ServerTime:
        return await self._rest.execute(RequestSpec.public("/0/public/Time", response_type=ServerTime))

    async def get_system_status(self) -> SystemStatus:
        return await self._rest.execute(
            RequestSpec.public("/0/public/SystemStatus", response_type=SystemStatus)
        )

    async def get_assets(self, asset: Union[str, Iterable[str], None] = None) -> Any:
        return await self._rest.execute(RequestSpec.public("/0/public/Assets", {"asset": _pairs(asset)}))

    async def get_asset_pairs(self, pair: Union[str, Iterable[str], None] = None,
                              info: Optional[str] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.public("/0/public/AssetPairs", {"pair": _pairs(pair), "info": info})
        )

    async def get_ticker(self, pair: Union[str, Iterable[str], None] = None) -> Any:
        return await self._rest.execute(RequestSpec.public("/0/public/Ticker", {"pair": _pairs(pair)}))

    async def get_ohlc(self, pair: str, interval: Optional[int] = None,
                       since: Optional[int] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.public("/0/public/OHLC", {"pair": pair, "interval": interval, "since": since})
        )

    async def get_order_book(self, pair: str, count: Optional[int] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.public("/0/public/Depth", {"pair": pair, "count": count})
        )

    async def get_recent_trades(self, pair: str, since: Optional[str] = None,
                                count: Optional[int] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.public("/0/public/Trades", {"pair": pair, "since": since, "count": count})
        )

    async def get_recent_spreads(self, pair: str, since: Optional[int] = None) -> Any:
        return await self._rest.execute(
            RequestSpec.public("/0/public/Spread", {"pair": pair, "since": since})
        )
