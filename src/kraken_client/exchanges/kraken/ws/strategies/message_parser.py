from typing import Any, Dict, List, Union

import msgspec

from kraken_client.infrastructure.exceptions.exchange import WsProtocolError
from kraken_client.infrastructure.networking.websocket import MessageParser, MessageType, ParsedMessage

_EVENT_TYPES = {
    "heartbeat": MessageType.HEARTBEAT,
    "systemStatus": MessageType.SYSTEM_STATUS,
    "pong": MessageType.PONG,
    "subscriptionStatus": MessageType.SUBSCRIPTION_STATUS,
    "error": MessageType.ERROR,
}


def base_channel_name(channel_name: str) -> str:
    """'book-10' -> 'book', 'ohlc-5' -> 'ohlc'; other names pass through."""
    return channel_name.split("-", 1)[0]


class KrakenMessageParser(MessageParser):
    """
    Kraken v1 frame parser.

    Objects carry an ``event`` field. Arrays are data frames, either
    ``[channelID, payload..., channelName, pair]`` for public channels or
    ``[payload, channelName, {"sequence": n}]`` for private ones.
    """

    def parse_message(self, raw_message: Union[str, bytes]) -> ParsedMessage:
        try:
            frame = msgspec.json.decode(raw_message)
        except msgspec.DecodeError as e:
            raise WsProtocolError(f"Invalid JSON frame: {e}", raw=self._preview(raw_message)) from e

        if isinstance(frame, dict):
            return self._parse_event(frame)
        if isinstance(frame, list):
            return self._parse_data(frame, raw_message)
        raise WsProtocolError(f"Unexpected frame type {type(frame).__name__}",
                              raw=self._preview(raw_message))

    def _parse_event(self, frame: Dict[str, Any]) -> ParsedMessage:
        message_type = _EVENT_TYPES.get(frame.get("event"), MessageType.UNKNOWN)

        if message_type == MessageType.SUBSCRIPTION_STATUS:
            subscription = frame.get("subscription") or {}
            channel_name = frame.get("channelName")
            name = subscription.get("name") or (base_channel_name(channel_name) if channel_name else None)
            return ParsedMessage(
                message_type=message_type,
                channel_name=channel_name,
                subscription_name=name,
                pair=frame.get("pair"),
                channel_id=frame.get("channelID"),
                status=frame.get("status"),
                error_message=frame.get("errorMessage"),
                reqid=frame.get("reqid"),
                raw_data=frame,
            )

        return ParsedMessage(
            message_type=message_type,
            status=frame.get("status"),
            error_message=frame.get("errorMessage"),
            reqid=frame.get("reqid"),
            raw_data=frame,
        )

    def _parse_data(self, frame: List[Any], raw_message: Union[str, bytes]) -> ParsedMessage:
        # Private: [payload, channelName, {"sequence": n}]
        if len(frame) == 3 and isinstance(frame[1], str) and isinstance(frame[2], dict):
            return ParsedMessage(
                message_type=MessageType.DATA,
                channel_name=frame[1],
                subscription_name=base_channel_name(frame[1]),
                sequence=frame[2].get("sequence"),
                data=frame[0],
                raw_data=frame,
            )

        # Public: [channelID, payload..., channelName, pair]
        if (len(frame) >= 4 and isinstance(frame[0], int)
                and isinstance(frame[-2], str) and isinstance(frame[-1], str)):
            payload = frame[1] if len(frame) == 4 else list(frame[1:-2])
            return ParsedMessage(
                message_type=MessageType.DATA,
                channel_name=frame[-2],
                subscription_name=base_channel_name(frame[-2]),
                pair=frame[-1],
                channel_id=frame[0],
                data=payload,
                raw_data=frame,
            )

        raise WsProtocolError("Unrecognised data frame layout", raw=self._preview(raw_message))

    @staticmethod
    def _preview(raw_message: Union[str, bytes]) -> str:
        if isinstance(raw_message, bytes):
            raw_message = raw_message.decode("utf-8", errors="replace")
        return raw_message[:500]
