import asyncio
import dataclasses
import json
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def make_json_safe(obj: Any) -> Any:
    """
    Convert arbitrary Python objects into JSON-serializable structures.

    Handles primitives, Pydantic models, dataclasses, paths,
    dictionaries, and iterables. Falls back to ``str(obj)``.

    :param obj: Any Python object.
    :return: A JSON-serializable representation.
    """
    if obj is None:
        return None
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return make_json_safe(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        return {str(k): make_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [make_json_safe(v) for v in obj]
    return str(obj)


class RelayError(Exception):
    """Base class for errors raised by the channel relay."""


class NotConnectedError(RelayError):
    """Raised when a command needs an open connection and there is none."""


class ReplyTimeoutError(RelayError):
    """Raised when the host does not answer a request in time."""

    def __init__(self, name: str, timeout: float):
        super().__init__(f"No reply to '{name}' within {timeout:.1f}s")
        self.name = name
        self.timeout = timeout


class RelayStateError(RelayError):
    """Raised on an illegal connection state transition."""


class ProtocolError(RelayError):
    """Raised when an inbound payload is not a valid event record."""


class CommandModel(BaseModel):
    """An outbound command: a name plus an arbitrary payload."""
    name: str
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_json(self) -> str:
        """
        Serialize the command into its wire envelope.

        The envelope is the payload with the command name stored
        under ``type``. A ``type`` key inside the payload is overridden.

        :return: JSON text ``{"type": name, ...payload}``.
        """
        envelope = {str(k): make_json_safe(v) for k, v in self.payload.items()}
        envelope["type"] = self.name
        return json.dumps(envelope)


def encode_command(name: str, payload: Optional[Mapping[str, Any]] = None, **fields: Any) -> str:
    """
    Encode a command for the wire.

    :param name: Command name, sent as ``type``.
    :param payload: Optional mapping of payload fields.
    :param fields: Extra payload fields; they win over ``payload``.
    :return: JSON text.
    """
    merged: Dict[str, Any] = dict(payload or {})
    merged.update(fields)
    return CommandModel(name=name, payload=merged).to_json()


def decode_event(message: Any) -> Dict[str, Any]:
    """
    Decode an inbound message into an event record.

    :param message: Raw text or bytes frame.
    :return: The full record; ``record["type"]`` is the event name.
    :raises ProtocolError: If the frame is not a JSON object with a
        string ``type`` field.
    """
    if isinstance(message, (bytes, bytearray)):
        try:
            message = message.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Undecodable frame: {e}") from e
    try:
        record = json.loads(message)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Non-JSON message: {message!r}") from e
    if not isinstance(record, dict):
        raise ProtocolError(f"Expected a JSON object, got {type(record).__name__}")
    event_type = record.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise ProtocolError(f"Missing 'type' field: {record!r}")
    return record


class RecordedEvent(BaseModel):
    """One interaction captured by the host while recording."""
    model_config = ConfigDict(populate_by_name=True)

    event_type: str = Field(alias="eventType")
    component_id: str = Field(alias="componentId")
    event_data: Any = Field(default=None, alias="eventData")
    timestamp: int = 0


class StopRecordingReply(BaseModel):
    """Reply to ``op_stop_recording``."""
    events: List[Dict[str, Any]] = Field(default_factory=list)

    def recorded(self) -> List[RecordedEvent]:
        """Parse the raw events into :class:`RecordedEvent` models."""
        return [RecordedEvent.model_validate(e) for e in self.events]


class PendingRegistry:
    """
    Manage futures waiting for a reply from the host.

    Request IDs cycle from 1 to ``max_id`` with wrap-around. Each
    entry remembers the command name so that replies without an id
    can be matched to the oldest request for the same command.
    """

    def __init__(self, max_id: int = 65535):
        self._pending: "OrderedDict[int, Tuple[str, asyncio.Future[Any]]]" = OrderedDict()
        self._counter: int = 0
        self._max_id = max_id

    def __len__(self) -> int:
        return len(self._pending)

    def next_id(self) -> int:
        """
        Generate the next free request ID.

        :return: Unique request ID.
        :raises RuntimeError: If no free ID is available.
        """
        for _ in range(self._max_id):
            self._counter = self._counter % self._max_id + 1
            if self._counter not in self._pending:
                return self._counter
        raise RuntimeError("No free request IDs available")

    def register(self, req_id: int, name: str, future: "asyncio.Future[Any]") -> None:
        """Register a future for command ``name`` under ``req_id``."""
        self._pending[req_id] = (name, future)

    def pop(self, req_id: int) -> Optional["asyncio.Future[Any]"]:
        """Remove and return the future for ``req_id``, if any."""
        entry = self._pending.pop(req_id, None)
        return entry[1] if entry else None

    def match(self, record: Mapping[str, Any]) -> Optional[int]:
        """
        Find the request a reply record answers.

        A record carrying ``request_id`` only ever matches that id; a
        stale id matches nothing. Records without one go to the oldest
        pending request whose command name equals the record's ``type``.

        :param record: Decoded inbound record.
        :return: The matching request ID or ``None``.
        """
        if "request_id" in record:
            req_id = record["request_id"]
            if isinstance(req_id, int) and not isinstance(req_id, bool) and req_id in self._pending:
                return req_id
            return None
        event_type = record.get("type")
        for candidate, (name, _) in self._pending.items():
            if name == event_type:
                return candidate
        return None

    def resolve(self, record: Mapping[str, Any]) -> bool:
        """
        Resolve the request answered by ``record``.

        :param record: Decoded inbound record.
        :return: ``True`` if a pending future was resolved.
        """
        req_id = self.match(record)
        if req_id is None:
            return False
        future = self.pop(req_id)
        if future and not future.done():
            future.set_result(dict(record))
            return True
        return False

    def cancel_all(self, exc: Optional[Exception] = None) -> None:
        """
        Fail all pending futures.

        :param exc: Optional exception to set instead of cancellation.
        """
        for _, fut in self._pending.values():
            if not fut.done():
                if exc:
                    fut.set_exception(exc)
                else:
                    fut.cancel()
        self._pending.clear()
