from abc import ABC, abstractmethod
from typing import Any

from ..structs import ConnectionContext
from ..reconnection import ReconnectionPolicy


class ConnectionStrategy(ABC):
    """
    Strategy for WebSocket connection establishment.

    ``connect`` returns a connection object offering ``send(str)``,
    ``recv() -> str`` and ``close()`` coroutines. The session owns the
    returned connection; strategies keep no reference to it.
    """

    @abstractmethod
    def create_connection_context(self) -> ConnectionContext:
        pass

    @abstractmethod
    async def connect(self) -> Any:
        """
        Open one connection.

        Raises:
            Any exception on failure; the session wraps it in WsConnectFailedError
        """
        pass

    @abstractmethod
    def get_reconnection_policy(self) -> ReconnectionPolicy:
        pass
