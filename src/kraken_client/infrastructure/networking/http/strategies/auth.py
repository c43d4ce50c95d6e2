"""
Authentication Strategy Interface

Strategy for request authentication and signing.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any

from ..structs import RequestSpec
from .structs import AuthenticationData


class AuthStrategy(ABC):
    """
    Strategy for request authentication and signing.

    Called by the REST manager only after the request was admitted by the
    rate limiter, so nonces are drawn as late as possible.
    """

    @abstractmethod
    def sign_request(self, request: RequestSpec, params: Dict[str, Any]) -> AuthenticationData:
        """
        Generate authentication data for a private request.

        Args:
            request: The request being executed
            params: Request parameters (form fields)

        Returns:
            AuthenticationData with headers and the exact body to send
        """
        pass

    @property
    @abstractmethod
    def has_credentials(self) -> bool:
        pass
