"""Pytest fixtures for pioneer tests."""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
import websockets
from pydantic import BaseModel

from pioneer.config import RelaySettings
from pioneer.events import EventEmitter
from pioneer.protocol import ReplyTimeoutError


class FakeHost:
    """A local WebSocket server standing in for the GUI host."""

    def __init__(self):
        self.received: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()
        self.connections: List[Any] = []
        self.on_message: Optional[Callable[[Any, Dict[str, Any]], Awaitable[None]]] = None
        self.server = None

    async def start(self) -> None:
        self.server = await websockets.serve(self._handler, "127.0.0.1", 0)

    async def close(self) -> None:
        self.server.close()
        await self.server.wait_closed()

    @property
    def port(self) -> int:
        return next(iter(self.server.sockets)).getsockname()[1]

    @property
    def url(self) -> str:
        return f"ws://127.0.0.1:{self.port}"

    async def _handler(self, connection) -> None:
        self.connections.append(connection)
        try:
            async for message in connection:
                record = json.loads(message)
                await self.received.put(record)
                if self.on_message is not None:
                    await self.on_message(connection, record)
        except websockets.ConnectionClosed:
            pass

    async def next_message(self, timeout: float = 2.0) -> Dict[str, Any]:
        return await asyncio.wait_for(self.received.get(), timeout=timeout)

    async def send(self, message: Any) -> None:
        """Send to the most recent connection; dicts are JSON-encoded."""
        text = message if isinstance(message, str) else json.dumps(message)
        await self.connections[-1].send(text)


class RecordingRelay:
    """Relay stand-in that records commands instead of sending them."""

    def __init__(self, settings: Optional[RelaySettings] = None):
        self.settings = settings or RelaySettings()
        self.emitter = EventEmitter()
        self.sent: List[Tuple[str, Dict[str, Any]]] = []
        self.requests: List[str] = []
        self.replies: Dict[str, Dict[str, Any]] = {}

    def fire(self, name, payload=None, **fields):
        merged = dict(payload or {})
        merged.update(fields)
        self.sent.append((name, merged))

    def subscribe(self, event, handler=None):
        return self.emitter.on(event, handler)

    async def request(self, name, payload=None, result_type=dict, timeout=None, **fields):
        self.requests.append(name)
        if name not in self.replies:
            raise ReplyTimeoutError(name, timeout or self.settings.reply_timeout)
        raw = self.replies[name]
        if isinstance(result_type, type) and issubclass(result_type, BaseModel):
            return result_type.model_validate(raw)
        return result_type(raw)

    async def flush(self):
        pass

    def names(self) -> List[str]:
        return [name for name, _ in self.sent]


@pytest_asyncio.fixture
async def host():
    fake = FakeHost()
    await fake.start()
    try:
        yield fake
    finally:
        await fake.close()


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings(reconnect_delay=0.05, reply_timeout=1.0)


@pytest.fixture
def recording_relay() -> RecordingRelay:
    return RecordingRelay()
