"""
REST Transport Manager

REST transport with strategy composition. Every call runs the same pipeline:
rate limit admission, optional signing, HTTP exchange, envelope parsing.
Nothing is retried.
"""

import asyncio
import time
from typing import Any, Dict, Optional
from collections import deque

import aiohttp
import msgspec

from ...exceptions.exchange import (
    ApiRejectedError, ApiTransportError, ApiMalformedError, MissingCredentialsError
)
from ...logging import get_logger, HFTLoggerInterface
from .strategies import RestStrategySet, RequestMetrics, RequestContext
from .structs import RequestSpec, ResponseEnvelope


def _preview(body: bytes, limit: int = 100) -> str:
    return body[:limit].decode("utf-8", errors="replace")


class RestManager:
    """
    REST transport manager with strategy composition.

    Provides a single ``execute`` entry point for authenticated and
    unauthenticated requests.
    """

    def __init__(self, strategy_set: RestStrategySet,
                 session: Optional[aiohttp.ClientSession] = None,
                 logger: Optional[HFTLoggerInterface] = None):
        self.strategy_set = strategy_set

        # Session management; an injected session is owned by the caller
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None
        self._semaphore: Optional[asyncio.Semaphore] = None

        self._metrics = RequestMetrics()
        self._latency_samples = deque(maxlen=1000)

        self._request_context: RequestContext = strategy_set.request_strategy.create_request_context()

        self.logger = logger or get_logger('rest.manager')

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Ensure aiohttp session is created."""
        context = self._request_context

        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(context.max_concurrent)

        if self._session is not None and not self._session.closed:
            return

        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=context.max_concurrent,
            ttl_dns_cache=300,
            keepalive_timeout=context.keepalive_timeout,
        )

        timeout = aiohttp.ClientTimeout(
            total=context.timeout,
            connect=context.connection_timeout,
            sock_connect=context.connection_timeout,
        )

        default_headers = {
            'Accept': 'application/json',
            'Accept-Encoding': 'gzip, deflate',
        }
        if context.default_headers:
            default_headers.update(context.default_headers)

        self._session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            json_serialize=lambda obj: msgspec.json.encode(obj).decode('utf-8'),
            headers=default_headers
        )
        self._owns_session = True

    def _update_metrics(self, latency_ms: float, error: Optional[Exception]):
        self._metrics.total_requests += 1

        if error is None:
            self._metrics.successful_requests += 1
        elif isinstance(error, ApiRejectedError):
            self._metrics.rejected_requests += 1
        elif isinstance(error, ApiMalformedError):
            self._metrics.malformed_responses += 1
        elif isinstance(error, ApiTransportError):
            self._metrics.transport_errors += 1
        else:
            self._metrics.unexpected_errors += 1

        self._latency_samples.append(latency_ms)
        self._metrics.avg_latency_ms = sum(self._latency_samples) / len(self._latency_samples)
        self._metrics.max_latency_ms = max(self._metrics.max_latency_ms, latency_ms)

    def _parse_response(self, request: RequestSpec, status: int, body: bytes) -> Any:
        """
        Decode the ``{"error": [...], "result": ...}`` envelope.

        A non-empty error list is a rejection whatever the HTTP status.
        """
        try:
            envelope = msgspec.json.decode(body, type=ResponseEnvelope)
        except msgspec.DecodeError:
            if status >= 400:
                raise ApiTransportError(status, f"HTTP error without envelope: {_preview(body)}")
            raise ApiMalformedError(status, f"Invalid JSON response: {_preview(body)}")
        except msgspec.ValidationError as e:
            if status >= 400:
                raise ApiTransportError(status, f"HTTP error without envelope: {_preview(body)}")
            raise ApiMalformedError(status, f"Unexpected envelope shape: {e}")

        if envelope.error:
            raise self.strategy_set.exception_handler_strategy.handle_error(status, envelope.error)

        if status >= 400:
            raise ApiTransportError(status, f"HTTP {status} with empty error list")

        if envelope.result is None:
            raise ApiMalformedError(status, "Envelope carries neither errors nor a result")

        if request.response_type is None:
            return envelope.result

        try:
            return msgspec.convert(envelope.result, request.response_type)
        except msgspec.ValidationError as e:
            raise ApiMalformedError(status, f"Result does not match {request.response_type}: {e}")

    async def execute(self, request: RequestSpec) -> Any:
        """
        Execute a request with full strategy coordination.

        Raises:
            MissingCredentialsError: private request without credentials
            ApiRejectedError: venue returned errors
            ApiTransportError: connection failure, timeout or bare HTTP error
            ApiMalformedError: response not in the expected shape
        """
        if request.private and (self.strategy_set.auth_strategy is None
                                or not self.strategy_set.auth_strategy.has_credentials):
            raise MissingCredentialsError(f"{request.path} requires API credentials")

        await self._ensure_session()

        url = f"{self._request_context.base_url}{request.path}"
        start_time = time.perf_counter()
        error: Optional[Exception] = None

        async with self._semaphore:
            # Step 1: admission; never rejects, may wait
            await self.strategy_set.rate_limit_strategy.admit(request.classification)

            try:
                # Step 2: request preparation
                request_params: Dict[str, Any] = self.strategy_set.request_strategy.prepare_request(request)

                # Step 3: signing (nonce is drawn here, after admission)
                if request.private:
                    auth_data = self.strategy_set.auth_strategy.sign_request(request, dict(request.params))
                    request_params.setdefault('headers', {}).update(auth_data.headers)
                    if auth_data.params:
                        request_params.setdefault('params', {}).update(auth_data.params)
                    if auth_data.data is not None:
                        request_params['data'] = auth_data.data

                # Step 4: HTTP exchange
                try:
                    async with self._session.request(request.method.value, url, **request_params) as response:
                        status = response.status
                        body = await response.read()
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    raise ApiTransportError(0, f"{type(e).__name__}: {e}") from e

                # Step 5: envelope
                return self._parse_response(request, status, body)

            except Exception as e:
                error = e
                raise
            finally:
                execution_time_ms = (time.perf_counter() - start_time) * 1000
                self._update_metrics(execution_time_ms, error)

                if error is None:
                    self.logger.debug("REST request completed",
                                      method=request.method.value,
                                      path=request.path,
                                      latency_ms=round(execution_time_ms, 2))
                else:
                    self.logger.warning("REST request failed",
                                        method=request.method.value,
                                        path=request.path,
                                        error_type=type(error).__name__,
                                        error_message=str(error))
                self.logger.latency("rest_request", execution_time_ms,
                                    path=request.path,
                                    classification=request.classification.value)

    def get_metrics(self) -> RequestMetrics:
        return self._metrics

    def reset_metrics(self):
        self._metrics = RequestMetrics()
        self._latency_samples.clear()

    async def close(self):
        """Close the session if this manager created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

        self.logger.debug("RestManager closed")
