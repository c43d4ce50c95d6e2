"""
WebSocket Session

Long-lived streaming session driven by connection, subscription and message
parser strategies. Owns exactly one connection at a time, replays desired
subscriptions on every (re)connect and demultiplexes inbound frames to the
bounded queues of SubscriptionHandle objects.

Locking: one asyncio.Lock guards the subscription tables and the current
connection. Caller operations and the frame dispatcher both take it; session
events are emitted only after it is released.
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

import msgspec

from kraken_client.config.structs import WebSocketConfig
from kraken_client.infrastructure.exceptions.exchange import (
    WsConnectFailedError,
    WsError,
    WsNotConnectedError,
    WsProtocolError,
    WsSubscriptionError,
    WsTimeoutError,
    WsUnknownSubscriptionError,
)
from kraken_client.infrastructure.logging import get_logger, HFTLoggerInterface
from kraken_client.utils.task_utils import TaskManager, cancel_tasks_with_timeout, safe_close_connection

from .reconnection import ReconnectionPolicy
from .strategies import ConnectionStrategy, MessageParser, SubscriptionStrategy
from .structs import (
    ConnectionState,
    MessageType,
    ParsedMessage,
    SessionEvent,
    SessionEventType,
    SessionMetrics,
    StreamMessage,
    Subscription,
    SubscriptionAction,
    SubscriptionKey,
    SubscriptionStatus,
)

EventHandler = Callable[[SessionEvent], Awaitable[None]]

_CLOSED = object()


def _consume_exception(future: asyncio.Future) -> None:
    # Keeps unobserved ack failures out of the loop's exception handler
    if not future.cancelled():
        future.exception()


class SubscriptionHandle:
    """
    Caller-side view of one ``subscribe`` call.

    Groups the per-pair subscriptions of the call and owns a bounded delivery
    queue. When the queue is full the oldest message is dropped.
    """

    def __init__(self, channel: str, subscriptions: List[Subscription], options: Dict[str, Any],
                 max_queue_size: int, default_timeout: float, logger: HFTLoggerInterface):
        self.channel = channel
        self.options = dict(options)
        self._subscriptions: Dict[SubscriptionKey, Subscription] = {s.key: s for s in subscriptions}
        self._futures: Dict[SubscriptionKey, asyncio.Future] = {}
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self._default_timeout = default_timeout
        self._closed = False
        self.logger = logger
        self.dropped_messages = 0

        for key in self._subscriptions:
            self._futures[key] = self._new_future()

    @staticmethod
    def _new_future() -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.add_done_callback(_consume_exception)
        return future

    @property
    def pairs(self) -> List[Optional[str]]:
        return [s.pair for s in self._subscriptions.values()]

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions.values())

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_active(self) -> bool:
        return all(s.status == SubscriptionStatus.ACTIVE for s in self._subscriptions.values())

    def status(self, pair: Optional[str] = None) -> SubscriptionStatus:
        for sub in self._subscriptions.values():
            if sub.pair == pair or pair is None:
                return sub.status
        raise KeyError(pair)

    @property
    def statuses(self) -> Dict[Optional[str], SubscriptionStatus]:
        return {s.pair: s.status for s in self._subscriptions.values()}

    async def wait_active(self, timeout: Optional[float] = None) -> None:
        """
        Wait until every subscription of this handle is acknowledged.

        Abandoning the wait (timeout or cancellation) leaves the acks
        outstanding; a later call can wait again.

        Raises:
            WsTimeoutError: if not all acks arrived within timeout
            WsSubscriptionError: if the venue refused a subscription
        """
        timeout = self._default_timeout if timeout is None else timeout
        futures = list(self._futures.values())
        if not futures:
            return

        _, pending = await asyncio.wait(futures, timeout=timeout)
        if pending:
            waiting = [key for key, fut in self._futures.items() if fut in pending]
            raise WsTimeoutError(f"Subscription ack not received within {timeout}s for {waiting}")

        for future in futures:
            error = future.exception()
            if error is not None:
                raise error

    async def get(self, timeout: Optional[float] = None) -> StreamMessage:
        """
        Next message for this handle.

        Raises:
            WsTimeoutError: if nothing arrived within timeout
            WsError: if the handle is closed and drained
        """
        if self._closed and self._queue.empty():
            raise WsError(f"Subscription handle for {self.channel} is closed")
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            raise WsTimeoutError(f"No message on {self.channel} within {timeout}s") from None
        if item is _CLOSED:
            raise WsError(f"Subscription handle for {self.channel} is closed")
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> StreamMessage:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    # Session-side mutators; called with the session lock held

    def _mark_pending(self, key: SubscriptionKey) -> None:
        self._subscriptions[key].status = SubscriptionStatus.PENDING
        if self._futures[key].done():
            self._futures[key] = self._new_future()

    def _mark_active(self, key: SubscriptionKey, channel_id: Optional[int]) -> None:
        sub = self._subscriptions[key]
        sub.status = SubscriptionStatus.ACTIVE
        sub.channel_id = channel_id
        sub.error_message = None
        future = self._futures[key]
        if not future.done():
            future.set_result(None)

    def _mark_failed(self, key: SubscriptionKey, error: WsSubscriptionError) -> None:
        sub = self._subscriptions[key]
        sub.status = SubscriptionStatus.FAILED
        sub.error_message = error.error_message
        future = self._futures[key]
        if future.done():
            future = self._futures[key] = self._new_future()
        future.set_exception(error)

    def _deliver(self, message: StreamMessage) -> bool:
        """Queue a message; returns False if an older message had to be dropped."""
        if self._closed:
            return True
        dropped = False
        if self._queue.full():
            self._queue.get_nowait()
            self.dropped_messages += 1
            dropped = True
            self.logger.warning("Subscription queue full, dropped oldest message",
                                channel=self.channel,
                                dropped_total=self.dropped_messages)
        self._queue.put_nowait(message)
        return not dropped

    def _close(self, reason: str = "unsubscribed") -> None:
        if self._closed:
            return
        self._closed = True
        for key, future in self._futures.items():
            if not future.done():
                future.set_exception(WsSubscriptionError(key, reason))
        for sub in self._subscriptions.values():
            if sub.status != SubscriptionStatus.FAILED:
                sub.status = SubscriptionStatus.UNSUBSCRIBED
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __repr__(self) -> str:
        return f"SubscriptionHandle(channel={self.channel!r}, statuses={self.statuses!r})"


class WebSocketSession:
    """
    Streaming session with subscription replay and automatic reconnection.

    Usage:
        session = WebSocketSession(config, connection_strategy,
                                   subscription_strategy, message_parser)
        await session.connect()
        handle = await session.subscribe("ticker", ["XBT/USD"])
        await handle.wait_active()
        async for message in handle:
            ...
    """

    def __init__(
        self,
        config: WebSocketConfig,
        connection_strategy: ConnectionStrategy,
        subscription_strategy: SubscriptionStrategy,
        message_parser: MessageParser,
        event_handler: Optional[EventHandler] = None,
        logger: Optional[HFTLoggerInterface] = None,
        name: str = "ws",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        self.config = config
        self.name = name
        self._connection_strategy = connection_strategy
        self._subscription_strategy = subscription_strategy
        self._parser = message_parser
        self._event_handler = event_handler
        self._reconnection_policy: ReconnectionPolicy = connection_strategy.get_reconnection_policy()
        self._clock = clock
        self._sleep = sleep
        self._rng = rng

        self.logger = logger or get_logger(f'ws.session.{name}')

        self._lock = asyncio.Lock()
        self._connect_lock = asyncio.Lock()
        self._task_manager = TaskManager(f"ws_session.{name}")

        self._connection: Optional[Any] = None
        self._connection_tasks: List[asyncio.Task] = []
        self._reconnect_task: Optional[asyncio.Task] = None
        self._state = ConnectionState.DISCONNECTED
        self._closed = False

        self._subscriptions: Dict[SubscriptionKey, Subscription] = {}
        self._owners: Dict[SubscriptionKey, SubscriptionHandle] = {}
        self._pending_acks: Dict[SubscriptionKey, Subscription] = {}
        self._pending_unsubscribes: Dict[SubscriptionKey, Subscription] = {}
        self._handles: List[SubscriptionHandle] = []
        self._channel_ids: Dict[int, SubscriptionKey] = {}
        self._pending_pings: Dict[int, asyncio.Future] = {}
        self._next_reqid = 0

        self._last_frame_at = 0.0
        self.system_status: Optional[str] = None
        self.metrics = SessionMetrics()

    # Properties

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriptions(self) -> Dict[SubscriptionKey, Subscription]:
        return dict(self._subscriptions)

    @property
    def handles(self) -> List[SubscriptionHandle]:
        return list(self._handles)

    # Lifecycle

    async def connect(self) -> None:
        """
        Make one connection attempt and replay desired subscriptions.

        No-op when already connected.

        Raises:
            WsConnectFailedError: if the attempt failed; state is DISCONNECTED
        """
        if self._closed:
            raise WsError("Session is closed")

        async with self._connect_lock:
            if self._connection is not None:
                return

            self._state = ConnectionState.CONNECTING
            try:
                await self._subscription_strategy.prepare()
                connection = await self._connection_strategy.connect()
            except asyncio.CancelledError:
                self._state = ConnectionState.DISCONNECTED
                raise
            except Exception as e:
                self._state = ConnectionState.DISCONNECTED
                self.logger.error("WebSocket connect failed",
                                  session=self.name,
                                  error_type=type(e).__name__,
                                  error_message=str(e))
                raise WsConnectFailedError(f"Connection attempt failed: {e}") from e

            replay_error: Optional[Exception] = None
            rejected: List[SessionEvent] = []
            async with self._lock:
                if self._closed:
                    replay_error = WsError("Session closed during connect")
                else:
                    self._connection = connection
                    self._last_frame_at = self._clock()
                    try:
                        for handle in self._handles:
                            try:
                                frame = self._subscribe_frame(handle)
                            except Exception as e:
                                rejected.extend(self._reject_handle(handle, e))
                                continue
                            await self._send_subscribe(connection, handle, frame)
                    except Exception as e:
                        replay_error = e
                        self._connection = None
                        self._pending_acks.clear()
                        for sub in self._subscriptions.values():
                            if sub.status == SubscriptionStatus.PENDING:
                                sub.status = SubscriptionStatus.UNSUBSCRIBED

                if replay_error is None:
                    self._state = ConnectionState.CONNECTED
                    self.metrics.connections += 1
                    self._connection_tasks = [
                        self._task_manager.create_task(self._reader_loop(connection), "reader"),
                    ]
                    if self.config.has_heartbeat:
                        self._connection_tasks.append(
                            self._task_manager.create_task(self._watchdog_loop(connection), "watchdog")
                        )
                else:
                    self._state = ConnectionState.DISCONNECTED

            if replay_error is not None:
                await safe_close_connection(connection, self.config.close_timeout, self.logger)
                raise WsConnectFailedError(f"Subscription replay failed: {replay_error}") from replay_error

        self.logger.info("WebSocket connected",
                         session=self.name,
                         replayed_handles=len(self._handles))
        self.logger.counter("ws_connections", session=self.name)
        await self._emit(SessionEvent(SessionEventType.CONNECTED,
                                      details={"replayed_handles": len(self._handles)}))
        for event in rejected:
            await self._emit(event)

    async def close(self) -> None:
        """User shutdown: no reconnect afterwards, all handles closed."""
        if self._closed:
            return
        self._closed = True

        await self._task_manager.shutdown(logger=self.logger)

        async with self._lock:
            connection = self._connection
            self._connection = None
            self._connection_tasks = []
            self._state = ConnectionState.DISCONNECTED
            self._fail_pending_pings(WsNotConnectedError("Session closed"))
            self._pending_acks.clear()
            self._pending_unsubscribes.clear()
            self._channel_ids.clear()
            for handle in self._handles:
                handle._close("session closed")
            self._handles.clear()
            self._subscriptions.clear()
            self._owners.clear()

        if connection is not None:
            await safe_close_connection(connection, self.config.close_timeout, self.logger)
            self.logger.info("WebSocket session closed", session=self.name)
            await self._emit(SessionEvent(SessionEventType.DISCONNECTED))

    async def __aenter__(self) -> "WebSocketSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Subscriptions

    async def subscribe(self, channel: str, pairs: Union[None, str, Sequence[str]] = None,
                        **options) -> SubscriptionHandle:
        """
        Subscribe ``channel`` for each pair (or once, for pairless channels).

        The frame is built before anything is registered, so a request that
        cannot be encoded leaves the session untouched.

        Raises:
            ValueError: if any channel+pair is already subscribed, or the
                options cannot be encoded into a frame
        """
        if self._closed:
            raise WsError("Session is closed")

        if isinstance(pairs, str):
            pairs = [pairs]
        pair_list: List[Optional[str]] = list(pairs) if pairs else [None]
        keys = [self._subscription_strategy.subscription_key(channel, pair) for pair in pair_list]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate pairs in subscription request for {channel}: {pair_list}")
        # Options are replayed on every reconnect; reject what can never be sent
        self._encode({"name": channel, **options})

        async with self._lock:
            for key in keys:
                if key in self._subscriptions:
                    raise ValueError(f"Already subscribed to {key[0]}:{key[1]}")

            subscriptions = [Subscription(channel_name=key[0], pair=key[1]) for key in keys]
            connection = self._connection
            frame: Optional[str] = None
            if connection is not None:
                message = self._subscription_strategy.create_subscription_message(
                    SubscriptionAction.SUBSCRIBE, channel, [key[1] for key in keys], options)
                frame = self._encode(message)

            handle = SubscriptionHandle(
                channel=channel,
                subscriptions=subscriptions,
                options=options,
                max_queue_size=self.config.max_queue_size,
                default_timeout=self.config.subscription_timeout,
                logger=self.logger,
            )
            for sub in subscriptions:
                self._subscriptions[sub.key] = sub
                self._owners[sub.key] = handle
            self._handles.append(handle)

            if connection is not None:
                try:
                    await self._send_subscribe(connection, handle, frame)
                except Exception as e:
                    # Connection is going away; the reader reports it and replay resends
                    self.logger.warning("Subscribe send failed, will replay on reconnect",
                                        session=self.name,
                                        channel=channel,
                                        error_type=type(e).__name__,
                                        error_message=str(e))

        self.logger.info("Subscription requested",
                         session=self.name,
                         channel=channel,
                         pairs=[p for p in pair_list if p],
                         connected=connection is not None)
        return handle

    async def unsubscribe(self, handle: SubscriptionHandle) -> None:
        """
        Withdraw a handle's subscriptions and close its queue.

        The subscriptions are removed from the desired set even when the
        unsubscribe frame cannot be sent.

        Raises:
            WsError: if the unsubscribe frame could not be sent
        """
        async with self._lock:
            if handle not in self._handles:
                handle._close()
                return
            self._handles.remove(handle)

            connection = self._connection
            to_send: List[Subscription] = []
            for sub in handle.subscriptions:
                self._subscriptions.pop(sub.key, None)
                self._owners.pop(sub.key, None)
                self._pending_acks.pop(sub.key, None)
                if connection is not None and sub.status in (SubscriptionStatus.ACTIVE,
                                                             SubscriptionStatus.PENDING):
                    to_send.append(sub)
                    self._pending_unsubscribes[sub.key] = sub
                elif sub.channel_id is not None:
                    self._channel_ids.pop(sub.channel_id, None)

            handle._close("unsubscribed")

            if to_send:
                message = self._subscription_strategy.create_subscription_message(
                    SubscriptionAction.UNSUBSCRIBE, handle.channel,
                    [s.pair for s in to_send], handle.options)
                try:
                    await connection.send(self._encode(message))
                except Exception as e:
                    for sub in to_send:
                        self._pending_unsubscribes.pop(sub.key, None)
                    raise WsError(f"Failed to send unsubscribe for {handle.channel}: {e}") from e

        self.logger.info("Unsubscribed",
                         session=self.name,
                         channel=handle.channel,
                         pairs=[p for p in handle.pairs if p])

    async def ping(self, timeout: Optional[float] = None) -> float:
        """
        Application-level ping.

        Returns:
            Round-trip time in seconds

        Raises:
            WsNotConnectedError: if the session has no connection
            WsTimeoutError: if no pong arrived within timeout
        """
        if timeout is None:
            timeout = self.config.ping_timeout or self.config.subscription_timeout

        async with self._lock:
            connection = self._connection
            if connection is None:
                raise WsNotConnectedError("Cannot ping: session is not connected")
            self._next_reqid += 1
            reqid = self._next_reqid
            message = self._subscription_strategy.create_ping_message(reqid)
            if message is None:
                raise WsError("Application ping is not supported by this venue")
            future = asyncio.get_running_loop().create_future()
            future.add_done_callback(_consume_exception)
            self._pending_pings[reqid] = future
            sent_at = self._clock()
            try:
                await connection.send(self._encode(message))
            except Exception as e:
                self._pending_pings.pop(reqid, None)
                raise WsNotConnectedError(f"Ping send failed: {e}") from e

        try:
            received_at = await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            raise WsTimeoutError(f"No pong within {timeout}s (reqid={reqid})") from None
        finally:
            self._pending_pings.pop(reqid, None)
        return received_at - sent_at

    # Internals: outbound

    @staticmethod
    def _encode(message: Dict[str, Any]) -> str:
        try:
            return msgspec.json.encode(message).decode("utf-8")
        except (TypeError, msgspec.EncodeError) as e:
            raise ValueError(f"Message cannot be encoded: {e}") from e

    def _subscribe_frame(self, handle: SubscriptionHandle) -> Optional[str]:
        to_send = [s for s in handle.subscriptions if s.status != SubscriptionStatus.FAILED]
        if not to_send:
            return None
        message = self._subscription_strategy.create_subscription_message(
            SubscriptionAction.SUBSCRIBE, handle.channel, [s.pair for s in to_send], handle.options)
        return self._encode(message)

    async def _send_subscribe(self, connection: Any, handle: SubscriptionHandle,
                              frame: Optional[str]) -> None:
        if frame is None:
            return
        for sub in handle.subscriptions:
            if sub.status == SubscriptionStatus.FAILED:
                continue
            handle._mark_pending(sub.key)
            self._pending_acks[sub.key] = sub
        await connection.send(frame)

    def _reject_handle(self, handle: SubscriptionHandle, error: Exception) -> List[SessionEvent]:
        events = []
        for sub in handle.subscriptions:
            if sub.status == SubscriptionStatus.FAILED:
                continue
            self._pending_acks.pop(sub.key, None)
            failure = WsSubscriptionError(sub.key, str(error))
            handle._mark_failed(sub.key, failure)
            self.logger.warning("Subscription could not be replayed",
                                session=self.name, channel=sub.key[0], pair=sub.key[1],
                                error_type=type(error).__name__,
                                error_message=str(error))
            events.append(SessionEvent(SessionEventType.SUBSCRIPTION_FAILED, error=failure,
                                       details={"channel": sub.key[0], "pair": sub.key[1]}))
        return events

    # Internals: inbound

    async def _reader_loop(self, connection: Any) -> None:
        while True:
            try:
                raw = await connection.recv()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await self._handle_disconnect(connection, e)
                return

            self._last_frame_at = self._clock()
            self.metrics.messages_received += 1
            try:
                events = await self._process_frame(connection, raw)
            except Exception as e:
                self.logger.error("Error dispatching frame",
                                  session=self.name,
                                  error_type=type(e).__name__,
                                  error_message=str(e))
                continue
            for event in events:
                await self._emit(event)

    async def _process_frame(self, connection: Any, raw: Union[str, bytes]) -> List[SessionEvent]:
        try:
            parsed = self._parser.parse_message(raw)
        except WsProtocolError as e:
            self.metrics.protocol_errors += 1
            self.logger.warning("Undecodable frame",
                                session=self.name,
                                error_message=str(e))
            return [SessionEvent(SessionEventType.PROTOCOL_ERROR, error=e)]

        async with self._lock:
            if connection is not self._connection:
                return []
            return self._dispatch(parsed)

    def _dispatch(self, parsed: ParsedMessage) -> List[SessionEvent]:
        message_type = parsed.message_type

        if message_type == MessageType.DATA:
            return self._route_data(parsed)

        if message_type == MessageType.SUBSCRIPTION_STATUS:
            return self._handle_ack(parsed)

        if message_type == MessageType.HEARTBEAT:
            return []

        if message_type == MessageType.PONG:
            future = self._pending_pings.get(parsed.reqid)
            if future is not None and not future.done():
                future.set_result(self._clock())
            return []

        if message_type == MessageType.SYSTEM_STATUS:
            self.system_status = parsed.status
            self.logger.info("Venue system status", session=self.name, status=parsed.status)
            return [SessionEvent(SessionEventType.SYSTEM_STATUS,
                                 details={"status": parsed.status, "raw": parsed.raw_data})]

        if message_type == MessageType.ERROR:
            self.logger.warning("Venue error event",
                                session=self.name,
                                error_message=parsed.error_message)
            return [SessionEvent(SessionEventType.VENUE_ERROR,
                                 error=WsError(parsed.error_message or "venue error"),
                                 details={"raw": parsed.raw_data})]

        self.logger.debug("Ignoring unrecognised frame", session=self.name, raw=str(parsed.raw_data)[:200])
        return []

    def _handle_ack(self, parsed: ParsedMessage) -> List[SessionEvent]:
        key = (parsed.subscription_name, parsed.pair)
        status = parsed.status

        if status == "subscribed":
            sub = self._pending_acks.pop(key, None)
            if sub is None:
                self.logger.debug("Ignoring ack for unknown or settled subscription",
                                  session=self.name, channel=key[0], pair=key[1])
                return []
            if parsed.channel_id is not None:
                self._channel_ids[parsed.channel_id] = key
            self._owners[key]._mark_active(key, parsed.channel_id)
            self.logger.info("Subscription active",
                             session=self.name, channel=key[0], pair=key[1],
                             channel_id=parsed.channel_id)
            return []

        if status == "error":
            sub = self._pending_acks.pop(key, None)
            message = parsed.error_message or "subscription rejected"
            error = WsSubscriptionError(key, message)
            if sub is None:
                self.logger.warning("Venue rejected unknown subscription",
                                    session=self.name, channel=key[0], pair=key[1],
                                    error_message=message)
                return [SessionEvent(SessionEventType.VENUE_ERROR, error=error,
                                     details={"raw": parsed.raw_data})]
            self._owners[key]._mark_failed(key, error)
            self.logger.warning("Subscription failed",
                                session=self.name, channel=key[0], pair=key[1],
                                error_message=message)
            return [SessionEvent(SessionEventType.SUBSCRIPTION_FAILED, error=error,
                                 details={"channel": key[0], "pair": key[1]})]

        if status == "unsubscribed":
            sub = self._pending_unsubscribes.pop(key, None)
            if sub is not None and sub.channel_id is not None:
                if self._channel_ids.get(sub.channel_id) == key:
                    del self._channel_ids[sub.channel_id]
            return []

        self.logger.debug("Ignoring subscription status", session=self.name, status=status)
        return []

    def _route_data(self, parsed: ParsedMessage) -> List[SessionEvent]:
        key: Optional[SubscriptionKey] = None
        if parsed.channel_id is not None:
            key = self._channel_ids.get(parsed.channel_id)
        if key is None:
            key = (parsed.subscription_name, parsed.pair)

        sub = self._subscriptions.get(key)
        if sub is not None and sub.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.PENDING):
            message = StreamMessage(
                channel_name=parsed.channel_name,
                pair=parsed.pair,
                data=parsed.data,
                channel_id=parsed.channel_id,
                sequence=parsed.sequence,
                received_at=parsed.timestamp,
            )
            if self._owners[key]._deliver(message):
                self.metrics.messages_routed += 1
            else:
                self.metrics.messages_dropped += 1
            return []

        if key in self._pending_unsubscribes:
            self.metrics.messages_dropped += 1
            self.logger.debug("Dropping frame for subscription being withdrawn",
                              session=self.name, channel=key[0], pair=key[1])
            return []

        self.metrics.unknown_frames += 1
        error = WsUnknownSubscriptionError(parsed.channel_name, parsed.pair, parsed.channel_id)
        self.logger.warning("Data frame for unknown subscription",
                            session=self.name,
                            channel=parsed.channel_name,
                            pair=parsed.pair,
                            channel_id=parsed.channel_id)
        return [SessionEvent(SessionEventType.UNKNOWN_SUBSCRIPTION, error=error)]

    # Internals: liveness and reconnection

    async def _watchdog_loop(self, connection: Any) -> None:
        timeout = self.config.heartbeat_timeout
        interval = max(timeout / 4, 0.01)
        while connection is self._connection:
            await asyncio.sleep(interval)
            if connection is not self._connection:
                return
            silent_for = self._clock() - self._last_frame_at
            if silent_for > timeout:
                self.metrics.heartbeat_timeouts += 1
                error = WsTimeoutError(f"No frames received for {silent_for:.1f}s")
                self.logger.warning("Heartbeat timeout, forcing reconnect",
                                    session=self.name,
                                    silent_seconds=round(silent_for, 3),
                                    heartbeat_timeout=timeout)
                await self._emit(SessionEvent(SessionEventType.HEARTBEAT_TIMEOUT, error=error))
                await self._handle_disconnect(connection, error)
                return

    async def _handle_disconnect(self, connection: Any, error: Optional[Exception]) -> None:
        async with self._lock:
            if connection is not self._connection:
                return
            self._connection = None
            self._state = ConnectionState.DISCONNECTED
            for sub in self._subscriptions.values():
                if sub.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.PENDING):
                    sub.status = SubscriptionStatus.UNSUBSCRIBED
                sub.channel_id = None
            self._pending_acks.clear()
            self._pending_unsubscribes.clear()
            self._channel_ids.clear()
            self._fail_pending_pings(WsNotConnectedError("Connection lost"))
            tasks = self._connection_tasks
            self._connection_tasks = []

        await cancel_tasks_with_timeout(tasks, logger=self.logger)
        await safe_close_connection(connection, self.config.close_timeout, self.logger)

        self.logger.warning("WebSocket disconnected",
                            session=self.name,
                            error_type=type(error).__name__ if error else None,
                            error_message=str(error) if error else None)
        await self._emit(SessionEvent(SessionEventType.DISCONNECTED, error=error))

        if self.config.auto_reconnect and not self._closed and not self._task_manager.is_stopping:
            if self._reconnect_task is None or self._reconnect_task.done():
                self._reconnect_task = self._task_manager.create_task(self._reconnect_loop(), "reconnect")

    async def _reconnect_loop(self) -> None:
        attempt = 0
        while not self._closed and self._connection is None:
            delay = self._reconnection_policy.calculate_delay(attempt, self._rng)
            self.metrics.reconnect_attempts += 1
            self.logger.info("Reconnecting",
                             session=self.name,
                             attempt=attempt + 1,
                             delay_seconds=round(delay, 3))
            await self._emit(SessionEvent(SessionEventType.RECONNECTING, attempt=attempt + 1, delay=delay))
            await self._sleep(delay)
            if self._closed:
                return
            try:
                await self.connect()
                return
            except WsConnectFailedError as e:
                attempt += 1
                await self._emit(SessionEvent(SessionEventType.RECONNECT_FAILED, error=e, attempt=attempt))
            except WsError:
                return

    def _fail_pending_pings(self, error: Exception) -> None:
        for future in self._pending_pings.values():
            if not future.done():
                future.set_exception(error)
        self._pending_pings.clear()

    async def _emit(self, event: SessionEvent) -> None:
        if self._event_handler is None:
            return
        try:
            await self._event_handler(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error("Session event handler failed",
                              session=self.name,
                              event_type=event.event_type.value,
                              error_type=type(e).__name__,
                              error_message=str(e))
