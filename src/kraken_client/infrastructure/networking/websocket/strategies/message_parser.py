from abc import ABC, abstractmethod
from typing import Union

from ..structs import ParsedMessage


class MessageParser(ABC):
    """Strategy turning raw inbound frames into routed ParsedMessage objects."""

    @abstractmethod
    def parse_message(self, raw_message: Union[str, bytes]) -> ParsedMessage:
        """
        Parse one frame.

        Raises:
            WsProtocolError: if the frame is not decodable
        """
        pass
