import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, Type, TypeVar, Union

import websockets
from pydantic import BaseModel
from websockets.asyncio.client import ClientConnection

from .config import RelaySettings
from .core import start_tracked_task
from .events import EventEmitter, Handler
from .protocol import (
    NotConnectedError,
    PendingRegistry,
    ProtocolError,
    RelayError,
    RelayStateError,
    ReplyTimeoutError,
    decode_event,
    encode_command,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Connector = Callable[[str], Awaitable[ClientConnection]]


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    STOPPED = "stopped"


#: Allowed transitions, keyed by ``(state, trigger)``.
TRANSITIONS: Dict[Tuple[ConnectionState, str], ConnectionState] = {
    (ConnectionState.DISCONNECTED, "connect"): ConnectionState.CONNECTING,
    (ConnectionState.STOPPED, "connect"): ConnectionState.CONNECTING,
    (ConnectionState.CONNECTING, "connect_success"): ConnectionState.CONNECTED,
    (ConnectionState.CONNECTING, "connect_failure"): ConnectionState.DISCONNECTED,
    (ConnectionState.CONNECTED, "remote_close"): ConnectionState.DISCONNECTED,
    (ConnectionState.DISCONNECTED, "local_stop"): ConnectionState.STOPPED,
    (ConnectionState.CONNECTING, "local_stop"): ConnectionState.STOPPED,
    (ConnectionState.CONNECTED, "local_stop"): ConnectionState.STOPPED,
}


class ChannelRelay:
    """
    Persistent duplex channel to the GUI host.

    Outbound commands are serialized as ``{"type": name, ...}`` JSON
    frames. Inbound frames are decoded and republished on a local
    :class:`~pioneer.events.EventEmitter` under their ``type`` field.
    :meth:`run` keeps the connection alive, reconnecting after a fixed
    delay whenever it closes or fails to open.

    No method except :meth:`request` raises to the caller; failures
    are logged and reconnection is the only recovery.
    """

    def __init__(
        self,
        settings: Optional[RelaySettings] = None,
        emitter: Optional[EventEmitter] = None,
        connector: Optional[Connector] = None,
    ):
        self.settings = settings or RelaySettings()
        self.emitter = emitter or EventEmitter()
        self._connector: Connector = connector or websockets.connect
        self._state = ConnectionState.DISCONNECTED
        self._ws: Optional[ClientConnection] = None
        self._pending = PendingRegistry()
        self._outbox: "asyncio.Queue[Tuple[str, Dict[str, Any]]]" = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None
        self._connected = asyncio.Event()
        self._stopping = asyncio.Event()
        #: Number of connection attempts made so far.
        self.attempts: int = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._ws is not None

    def _transition(self, trigger: str) -> None:
        try:
            target = TRANSITIONS[(self._state, trigger)]
        except KeyError:
            raise RelayStateError(f"Illegal transition '{trigger}' from {self._state.value}") from None
        logger.debug("Relay %s -> %s (%s)", self._state.value, target.value, trigger)
        self._state = target

    def subscribe(self, event: str, handler: Optional[Handler] = None):
        """
        Register ``handler`` for future events named ``event``.

        Past events are not replayed. Works as a decorator when
        ``handler`` is omitted.
        """
        return self.emitter.on(event, handler)

    async def connect(self) -> Optional[ClientConnection]:
        """
        Open a connection to the host and send the greeting.

        :return: The open connection, or ``None`` if it could not be opened.
        """
        if self.connected:
            return self._ws

        self._transition("connect")
        self.attempts += 1
        url = self.settings.url
        try:
            ws = await self._connector(url)
        except Exception as e:
            logger.error("Failed to connect to %s: %s", url, e)
            if self._state is ConnectionState.CONNECTING:
                self._transition("connect_failure")
            return None

        if self._state is ConnectionState.STOPPED:
            await ws.close()
            return None

        self._ws = ws
        self._transition("connect_success")
        self._connected.set()
        logger.info("Connected to %s", url)
        await self.send_command("hello", message=self.settings.greeting)
        return ws

    async def wait_connected(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until a connection is open.

        :param timeout: Seconds to wait, or ``None`` to wait forever.
        :return: ``True`` if connected, ``False`` on timeout.
        """
        try:
            await asyncio.wait_for(self._connected.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> None:
        """
        Keep the connection alive until :meth:`stop` is called.

        After every close or failed attempt the next attempt is made
        after ``settings.reconnect_delay`` seconds. The delay is fixed
        and attempts are not capped.
        """
        self._stopping.clear()
        delay = self.settings.reconnect_delay
        while not self._stopping.is_set():
            ws = await self.connect()
            if ws is not None:
                await self._receive_loop(ws)
            if self._stopping.is_set():
                break
            logger.info("Reconnecting to %s in %.1fs", self.settings.url, delay)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

    async def stop(self) -> None:
        """Close the connection and stop reconnecting."""
        self._stopping.set()
        if self._state is not ConnectionState.STOPPED:
            self._transition("local_stop")
        self._connected.clear()
        ws, self._ws = self._ws, None
        self._pending.cancel_all(NotConnectedError("Relay stopped"))

        if self._writer is not None:
            self._writer.cancel()
            self._writer = None
        while not self._outbox.empty():
            name, _ = self._outbox.get_nowait()
            self._outbox.task_done()
            logger.warning("Dropped unsent command '%s' on stop", name)

        if ws is not None:
            await ws.close()
        logger.info("Relay stopped")

    async def _receive_loop(self, ws: ClientConnection) -> None:
        try:
            async for message in ws:
                self._dispatch(message)
        except websockets.ConnectionClosed as e:
            logger.warning("Connection lost: %s", e)
        finally:
            self._on_disconnected(ws)

    def _on_disconnected(self, ws: ClientConnection) -> None:
        if self._ws is ws:
            self._ws = None
        if self._state is ConnectionState.CONNECTED:
            self._transition("remote_close")
            self._connected.clear()
            logger.info("Connection to %s closed", self.settings.url)
        self._pending.cancel_all(NotConnectedError("Connection closed"))

    def _dispatch(self, message: Union[str, bytes]) -> None:
        try:
            record = decode_event(message)
        except ProtocolError as e:
            logger.warning("Dropped inbound message: %s", e)
            return
        logger.debug("Received %s", record)
        self._pending.resolve(record)
        self.emitter.emit(record["type"], record)

    async def send_command(self, name: str, payload: Optional[Mapping[str, Any]] = None, **fields: Any) -> bool:
        """
        Send one command, best effort.

        Serialization failures and a closed transport are logged,
        never raised.

        :param name: Command name, sent as ``type``.
        :param payload: Optional payload mapping.
        :param fields: Extra payload fields.
        :return: ``True`` if the frame was handed to the transport.
        """
        try:
            message = encode_command(name, payload, **fields)
            ws = self._ws
            if ws is None or self._state is not ConnectionState.CONNECTED:
                raise NotConnectedError("not connected")
            await ws.send(message)
        except Exception as e:
            logger.error("Failed to send '%s': %s", name, e)
            return False
        logger.debug("Sent %s", message)
        return True

    def fire(self, name: str, payload: Optional[Mapping[str, Any]] = None, **fields: Any) -> None:
        """
        Queue a command and return immediately.

        Queued commands are sent in order by a single writer task.
        Needs a running event loop; without one the command is
        dropped and logged.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            logger.error("Cannot send '%s': %s", name, e)
            return
        merged: Dict[str, Any] = dict(payload or {})
        merged.update(fields)
        self._ensure_writer()
        self._outbox.put_nowait((name, merged))

    async def flush(self) -> None:
        """Wait until every queued command has been handled."""
        await self._outbox.join()

    def _ensure_writer(self) -> None:
        if self._writer is None or self._writer.done():
            self._writer = start_tracked_task(self._writer_loop(), name="pioneer-writer")

    async def _writer_loop(self) -> None:
        while True:
            name, payload = await self._outbox.get()
            try:
                await self.send_command(name, payload)
            finally:
                self._outbox.task_done()

    async def request(
        self,
        name: str,
        payload: Optional[Mapping[str, Any]] = None,
        result_type: Union[Type[BaseModel], Callable[[Any], T]] = dict,
        timeout: Optional[float] = None,
        **fields: Any,
    ) -> T:
        """
        Send a command and await the host's reply.

        * Previously fired commands are flushed first.
        * A ``request_id`` is added to the payload; the reply is matched
          by that id, or by command name when the host omits it.
        * The reply record is converted with ``result_type``: a Pydantic
          model is validated, a callable is applied.

        :param name: Command name.
        :param payload: Optional payload mapping.
        :param result_type: Expected reply type.
        :param timeout: Seconds to wait; defaults to ``settings.reply_timeout``.
        :return: The converted reply.
        :raises NotConnectedError: If the command could not be sent or the
            connection closed while waiting.
        :raises ReplyTimeoutError: If no reply arrived in time.
        :raises RelayError: If ``request_id`` is passed in ``fields``; it is
            reserved for reply correlation.
        """
        if "request_id" in fields:
            raise RelayError("request_id is reserved for reply correlation")
        timeout = self.settings.reply_timeout if timeout is None else timeout
        await self.flush()

        req_id = self._pending.next_id()
        future: asyncio.Future[Dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending.register(req_id, name, future)
        try:
            sent = await self.send_command(name, payload, request_id=req_id, **fields)
            if not sent:
                raise NotConnectedError(f"Could not send '{name}'")
            try:
                raw = await asyncio.wait_for(future, timeout=timeout)
            except asyncio.TimeoutError as e:
                raise ReplyTimeoutError(name, timeout) from e
        finally:
            self._pending.pop(req_id)

        if isinstance(result_type, type) and issubclass(result_type, BaseModel):
            return result_type.model_validate(raw)
        if callable(result_type):
            return result_type(raw)
        return raw
