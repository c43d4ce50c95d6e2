"""
Exception Handler Strategy Interface

Converts venue error lists into typed exceptions.
"""

from abc import ABC, abstractmethod
from typing import List

from ....exceptions.exchange import ApiRejectedError


class ExceptionHandlerStrategy(ABC):

    @abstractmethod
    def handle_error(self, status_code: int, errors: List[str]) -> ApiRejectedError:
        """
        Map a non-empty venue error list to an exception.

        Args:
            status_code: HTTP status code
            errors: Error strings from the response envelope

        Returns:
            ApiRejectedError or a more specific subclass
        """
        pass
