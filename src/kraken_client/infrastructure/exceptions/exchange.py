from typing import List, Optional, Tuple


class KrakenClientError(Exception):
    """Base exception for everything raised by the client."""
    pass


class ConfigurationError(KrakenClientError):
    """Configuration-specific exception for setup errors."""

    def __init__(self, message: str, setting_name: Optional[str] = None):
        self.setting_name = setting_name
        super().__init__(message)


# Credential errors (raised before any network activity)
class AuthError(KrakenClientError):
    """Credential material is missing or unusable."""
    pass


class MissingCredentialsError(AuthError):
    """A private operation was attempted without configured credentials."""
    pass


class InvalidSecretEncodingError(AuthError):
    """The API secret is not valid base64."""
    pass


# REST errors
class ApiError(KrakenClientError):
    """Base exception for all REST API errors."""

    def __init__(self, code: int, message: str) -> None:
        self.status_code = code
        self.message = message
        super().__init__(f"HTTP {code}: {message}")


class ApiRejectedError(ApiError):
    """The venue answered with a non-empty error list."""

    def __init__(self, code: int, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__(code, ", ".join(self.errors))


class RateLimitExceededError(ApiRejectedError):
    """Venue-side rate limit counter exceeded."""
    pass


class InvalidNonceError(ApiRejectedError):
    """Nonce not greater than the last one seen for this key."""
    pass


class InvalidKeyError(ApiRejectedError):
    """Unknown or disabled API key."""
    pass


class InvalidSignatureError(ApiRejectedError):
    """Signature did not verify, usually a wrong secret."""
    pass


class PermissionDeniedError(ApiRejectedError):
    """API key lacks the permission required by the endpoint."""
    pass


class InvalidArgumentsError(ApiRejectedError):
    pass


class InsufficientFundsError(ApiRejectedError):
    pass


class UnknownOrderError(ApiRejectedError):
    pass


class ServiceUnavailableError(ApiRejectedError):
    """Venue is busy, in maintenance or cancel-only mode."""
    pass


class ApiTransportError(ApiError):
    """Connection failure, timeout or an HTTP error without a venue envelope."""
    pass


class ApiMalformedError(ApiError):
    """Response body could not be decoded into the expected shape."""
    pass


# WebSocket errors
class WsError(KrakenClientError):
    """Base exception for streaming session errors."""
    pass


class WsConnectFailedError(WsError):
    """A single connection attempt failed."""
    pass


class WsNotConnectedError(WsError):
    pass


class WsTimeoutError(WsError):
    """An awaited frame (ack, pong, data, heartbeat) did not arrive in time."""
    pass


class WsProtocolError(WsError):
    """Inbound frame could not be decoded."""

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        self.raw = raw
        super().__init__(message)


class WsUnknownSubscriptionError(WsError):
    """Data frame that matches no known subscription."""

    def __init__(self, channel_name: Optional[str], pair: Optional[str],
                 channel_id: Optional[int] = None) -> None:
        self.channel_name = channel_name
        self.pair = pair
        self.channel_id = channel_id
        super().__init__(
            f"No subscription for channel={channel_name} pair={pair} channel_id={channel_id}"
        )


class WsSubscriptionError(WsError):
    """The venue refused a subscription or it was withdrawn before acknowledgement."""

    def __init__(self, key: Tuple[str, Optional[str]], message: str) -> None:
        self.key = key
        self.error_message = message
        super().__init__(f"Subscription {key[0]}:{key[1]} failed: {message}")
