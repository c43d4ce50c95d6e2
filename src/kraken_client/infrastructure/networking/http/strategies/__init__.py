from .structs import RequestContext, AuthenticationData, RequestMetrics
from .request import RequestStrategy
from .rate_limit import RateLimitStrategy
from .auth import AuthStrategy
from .exception_handler import ExceptionHandlerStrategy
from .strategy_set import RestStrategySet

__all__ = [
    'RequestContext',
    'AuthenticationData',
    'RequestMetrics',
    'RequestStrategy',
    'RateLimitStrategy',
    'AuthStrategy',
    'ExceptionHandlerStrategy',
    'RestStrategySet',
]
