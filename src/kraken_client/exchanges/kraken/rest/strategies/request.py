from typing import Any, Dict

from kraken_client.config.structs import ExchangeConfig
from kraken_client.infrastructure.networking.http import (
    RequestStrategy, RequestContext, RequestSpec, HTTPMethod
)


def format_params(params: Dict[str, Any]) -> Dict[str, str]:
    """Render parameter values the way Kraken expects them on the wire."""
    formatted = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            formatted[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple, set)):
            formatted[key] = ",".join(str(v) for v in value)
        else:
            formatted[key] = str(value)
    return formatted


class KrakenRequestStrategy(RequestStrategy):
    """Kraken request configuration: GET query strings, form-encoded POST bodies."""

    def __init__(self, exchange_config: ExchangeConfig, **kwargs):
        super().__init__(exchange_config.base_url, **kwargs)
        self.exchange_config = exchange_config

    def create_request_context(self) -> RequestContext:
        network = self.exchange_config.network
        return RequestContext(
            base_url=self.base_url,
            timeout=network.request_timeout,
            max_concurrent=network.max_concurrent,
            connection_timeout=network.connect_timeout,
            keepalive_timeout=network.keepalive_timeout,
            default_headers={'User-Agent': network.user_agent},
        )

    def prepare_request(self, request: RequestSpec) -> Dict[str, Any]:
        params = format_params(request.params)
        if request.method == HTTPMethod.GET:
            return {'params': params} if params else {}
        # Private POST bodies are produced by the auth strategy with the nonce
        if request.private:
            return {}
        return {'data': params}
