from .request import KrakenRequestStrategy, format_params
from .auth import KrakenAuthStrategy
from .exception_handler import KrakenExceptionHandlerStrategy, ERROR_PREFIX_MAPPING
from .rate_limit import KrakenRateLimit

__all__ = [
    'KrakenRequestStrategy',
    'format_params',
    'KrakenAuthStrategy',
    'KrakenExceptionHandlerStrategy',
    'ERROR_PREFIX_MAPPING',
    'KrakenRateLimit',
]
