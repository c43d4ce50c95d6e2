from typing import List, Type

from kraken_client.infrastructure.exceptions.exchange import (
    ApiRejectedError, RateLimitExceededError, InvalidNonceError, InvalidKeyError,
    InvalidSignatureError, PermissionDeniedError, InvalidArgumentsError,
    InsufficientFundsError, UnknownOrderError, ServiceUnavailableError
)
from kraken_client.infrastructure.networking.http import ExceptionHandlerStrategy
from kraken_client.infrastructure.logging import get_exchange_logger


# Matched as prefixes of Kraken's "<severity><category>:<message>" strings
ERROR_PREFIX_MAPPING = (
    ("EAPI:Rate limit exceeded", RateLimitExceededError),
    ("EOrder:Rate limit exceeded", RateLimitExceededError),
    ("EGeneral:Too many requests", RateLimitExceededError),
    ("EAPI:Invalid nonce", InvalidNonceError),
    ("EAPI:Invalid key", InvalidKeyError),
    ("EAPI:Invalid signature", InvalidSignatureError),
    ("EGeneral:Permission denied", PermissionDeniedError),
    ("EGeneral:Invalid arguments", InvalidArgumentsError),
    ("EOrder:Insufficient funds", InsufficientFundsError),
    ("EOrder:Unknown order", UnknownOrderError),
    ("EService:Unavailable", ServiceUnavailableError),
    ("EService:Busy", ServiceUnavailableError),
    ("EService:Market in cancel_only mode", ServiceUnavailableError),
    ("EService:Market in post_only mode", ServiceUnavailableError),
)


class KrakenExceptionHandlerStrategy(ExceptionHandlerStrategy):
    """Kraken error list to exception mapping; the first recognised error wins."""

    def __init__(self, logger=None):
        self.logger = logger or get_exchange_logger('kraken', 'rest.exception_handler')

    @staticmethod
    def classify(error: str) -> Type[ApiRejectedError]:
        for prefix, exc_class in ERROR_PREFIX_MAPPING:
            if error.startswith(prefix):
                return exc_class
        return ApiRejectedError

    def handle_error(self, status_code: int, errors: List[str]) -> ApiRejectedError:
        exc_class = ApiRejectedError
        for error in errors:
            exc_class = self.classify(error)
            if exc_class is not ApiRejectedError:
                break

        self.logger.counter("rest_api_rejections", error_class=exc_class.__name__)
        return exc_class(status_code, errors)
