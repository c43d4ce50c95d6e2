"""
Rate Limit Strategy Interface

Admission control for outbound requests, per request classification.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..structs import ApiClassification


class RateLimitStrategy(ABC):

    @abstractmethod
    async def admit(self, classification: ApiClassification) -> None:
        """
        Wait until a request of this classification may be sent.

        Never rejects; only delays.
        """
        pass

    @abstractmethod
    def cost(self, classification: ApiClassification) -> float:
        """Tokens one request of this classification consumes."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        pass
