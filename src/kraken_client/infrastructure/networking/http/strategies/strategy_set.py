"""
REST Strategy Set

Container bundling the strategies a RestManager is composed from.
"""

from dataclasses import dataclass
from typing import Optional

from .request import RequestStrategy
from .rate_limit import RateLimitStrategy
from .auth import AuthStrategy
from .exception_handler import ExceptionHandlerStrategy


@dataclass
class RestStrategySet:
    """
    Strategies for one REST transport.

    ``auth_strategy`` is None for public-only clients; private requests then
    fail with MissingCredentialsError before any network activity.
    """
    request_strategy: RequestStrategy
    rate_limit_strategy: RateLimitStrategy
    exception_handler_strategy: ExceptionHandlerStrategy
    auth_strategy: Optional[AuthStrategy] = None
