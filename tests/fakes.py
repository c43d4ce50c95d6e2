"""
Test doubles: fake clock and sleep, an in-memory WebSocket connection with a
matching connection strategy, and a scripted aiohttp session.
"""

import asyncio
from typing import Any, Dict, List, Optional, Union

import msgspec

from kraken_client.infrastructure.networking.websocket import (
    ConnectionStrategy, ConnectionContext, ReconnectionPolicy
)


# Kraken's published API-Sign regression vector
KRAKEN_TEST_SECRET = (
    "kQH5HW/8p1uGOVjbgWA7FunAmGO8lsSUXNsu3eow76sz84Q18fWxnyRzBHCd3pd5nE9qa99HAZtuZuj6F1huXg=="
)
KRAKEN_TEST_NONCE = 1616492376594
KRAKEN_TEST_PATH = "/0/private/AddOrder"
KRAKEN_TEST_BODY = "nonce=1616492376594&ordertype=limit&pair=XBTUSD&price=37500&type=buy&volume=1.25"
KRAKEN_TEST_SIGNATURE = (
    "4/dpxb3iT4tp/ZCVEwSnEsLxx0bqyhLpdfOpc6fn7OR8+UClSV5n9E6aSS8MPtnRfp32bAb0nmbRn6H8ndwLUQ=="
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested delays and advances the fake clock instead of waiting."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.calls: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)
        self.clock.advance(delay)
        await asyncio.sleep(0)


async def wait_for_condition(predicate, timeout: float = 1.0, interval: float = 0.001) -> None:
    """Yield to the loop until ``predicate()`` holds; fail the test otherwise."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met within timeout")
        await asyncio.sleep(interval)


# WebSocket

class FakeConnection:
    """In-memory WebSocket: tests ``feed`` inbound frames and inspect ``sent``."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.closed = False
        self.fail_send = False
        self._inbound: asyncio.Queue = asyncio.Queue()

    async def send(self, message: str) -> None:
        if self.closed or self.fail_send:
            raise ConnectionError("connection closed")
        self.sent.append(msgspec.json.decode(message))

    async def recv(self) -> str:
        item = await self._inbound.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbound.put_nowait(ConnectionError("connection closed"))

    def feed(self, frame: Any) -> None:
        if isinstance(frame, (str, bytes)):
            self._inbound.put_nowait(frame)
        else:
            self._inbound.put_nowait(msgspec.json.encode(frame).decode("utf-8"))

    def drop(self, error: Optional[Exception] = None) -> None:
        self._inbound.put_nowait(error or ConnectionError("connection reset by peer"))

    def sent_events(self, event: str) -> List[Dict[str, Any]]:
        return [message for message in self.sent if message.get("event") == event]


class FakeConnectionStrategy(ConnectionStrategy):
    """Hands out FakeConnection objects; ``fail_next`` makes attempts fail."""

    def __init__(self, policy: Optional[ReconnectionPolicy] = None):
        self.connections: List[FakeConnection] = []
        self.attempts = 0
        self._failures = 0
        self.policy = policy or ReconnectionPolicy(initial_delay=0.01, backoff_factor=2.0,
                                                   max_delay=0.1, jitter=0.0)

    def fail_next(self, count: int) -> None:
        self._failures = count

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]

    def create_connection_context(self) -> ConnectionContext:
        return ConnectionContext(url="wss://ws.test.invalid")

    async def connect(self) -> FakeConnection:
        self.attempts += 1
        if self._failures > 0:
            self._failures -= 1
            raise ConnectionRefusedError("connection refused")
        connection = FakeConnection()
        self.connections.append(connection)
        return connection

    def get_reconnection_policy(self) -> ReconnectionPolicy:
        return self.policy


def subscription_ack(name: str, pair: Optional[str] = None, status: str = "subscribed",
                     channel_id: Optional[int] = None, channel_name: Optional[str] = None,
                     error: Optional[str] = None, **options) -> Dict[str, Any]:
    frame: Dict[str, Any] = {
        "event": "subscriptionStatus",
        "status": status,
        "subscription": {"name": name, **options},
    }
    if pair is not None:
        frame["pair"] = pair
    if channel_id is not None:
        frame["channelID"] = channel_id
    if channel_name is not None or channel_id is not None:
        frame["channelName"] = channel_name or name
    if error is not None:
        frame["errorMessage"] = error
    return frame


# HTTP

class FakeResponse:
    def __init__(self, status: int, body: Union[str, bytes]):
        self.status = status
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


def envelope_response(result: Any = None, errors: Optional[List[str]] = None,
                      status: int = 200) -> FakeResponse:
    body: Dict[str, Any] = {"error": errors or []}
    if result is not None:
        body["result"] = result
    return FakeResponse(status, msgspec.json.encode(body).decode("utf-8"))


class FakeHttpSession:
    """Stands in for aiohttp.ClientSession; replies are consumed in order."""

    def __init__(self, *responses: FakeResponse, error: Optional[BaseException] = None):
        self.responses = list(responses)
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def close(self) -> None:
        self.closed = True

    @property
    def last_call(self) -> Dict[str, Any]:
        return self.calls[-1]
