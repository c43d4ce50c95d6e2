from .exchange import (
    KrakenClientError,
    ConfigurationError,
    AuthError,
    MissingCredentialsError,
    InvalidSecretEncodingError,
    ApiError,
    ApiRejectedError,
    RateLimitExceededError,
    InvalidNonceError,
    InvalidKeyError,
    InvalidSignatureError,
    PermissionDeniedError,
    InvalidArgumentsError,
    InsufficientFundsError,
    UnknownOrderError,
    ServiceUnavailableError,
    ApiTransportError,
    ApiMalformedError,
    WsError,
    WsConnectFailedError,
    WsNotConnectedError,
    WsTimeoutError,
    WsProtocolError,
    WsUnknownSubscriptionError,
    WsSubscriptionError,
)

__all__ = [
    'KrakenClientError',
    'ConfigurationError',
    'AuthError',
    'MissingCredentialsError',
    'InvalidSecretEncodingError',
    'ApiError',
    'ApiRejectedError',
    'RateLimitExceededError',
    'InvalidNonceError',
    'InvalidKeyError',
    'InvalidSignatureError',
    'PermissionDeniedError',
    'InvalidArgumentsError',
    'InsufficientFundsError',
    'UnknownOrderError',
    'ServiceUnavailableError',
    'ApiTransportError',
    'ApiMalformedError',
    'WsError',
    'WsConnectFailedError',
    'WsNotConnectedError',
    'WsTimeoutError',
    'WsProtocolError',
    'WsUnknownSubscriptionError',
    'WsSubscriptionError',
]
