from .structs import HTTPMethod, ApiClassification, RequestSpec, ResponseEnvelope
from .strategies import (
    RequestContext,
    AuthenticationData,
    RequestMetrics,
    RequestStrategy,
    RateLimitStrategy,
    AuthStrategy,
    ExceptionHandlerStrategy,
    RestStrategySet,
)
from .rate_limiter import TokenBucket, TokenBucketRateLimiter
from .rest_manager import RestManager

__all__ = [
    'HTTPMethod',
    'ApiClassification',
    'RequestSpec',
    'ResponseEnvelope',
    'RequestContext',
    'AuthenticationData',
    'RequestMetrics',
    'RequestStrategy',
    'RateLimitStrategy',
    'AuthStrategy',
    'ExceptionHandlerStrategy',
    'RestStrategySet',
    'TokenBucket',
    'TokenBucketRateLimiter',
    'RestManager',
]
