"""
Request Strategy Interface

Strategy for HTTP request configuration: connection setup and request formatting.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any

from ..structs import RequestSpec
from .structs import RequestContext


class RequestStrategy(ABC):
    """Strategy for HTTP request configuration."""

    def __init__(self, base_url: str, **kwargs):
        self.base_url = base_url

    @abstractmethod
    def create_request_context(self) -> RequestContext:
        """
        Create request configuration.

        Returns:
            RequestContext with URL, timeouts, connection limits
        """
        pass

    @abstractmethod
    def prepare_request(self, request: RequestSpec) -> Dict[str, Any]:
        """
        Prepare keyword arguments for ``aiohttp.ClientSession.request``.

        Private requests get their body from the auth strategy afterwards.
        """
        pass
