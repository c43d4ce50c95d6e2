from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from ..structs import SubscriptionAction, SubscriptionKey


class SubscriptionStrategy(ABC):
    """
    Strategy for building subscribe/unsubscribe frames.

    One frame covers one channel and any number of pairs.
    """

    @abstractmethod
    def create_subscription_message(
        self,
        action: SubscriptionAction,
        channel: str,
        pairs: Sequence[Optional[str]],
        options: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Create a complete subscribe or unsubscribe message.

        ``pairs`` may be ``[None]`` for channels without a pair.
        """
        pass

    def subscription_key(self, channel: str, pair: Optional[str]) -> SubscriptionKey:
        return (channel, pair)

    async def prepare(self) -> None:
        """
        Called before each connect attempt, before any subscription is replayed.

        Strategies refresh per-connection material (e.g. auth tokens) here.
        """
        return None

    def create_ping_message(self, reqid: int) -> Optional[Dict[str, Any]]:
        """Application-level ping frame, or None if the venue has none."""
        return None
