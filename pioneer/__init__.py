"""
Public API entry point for the package.

Exports the main building blocks:
  * :func:`egui` → start a fluent builder chain
  * :func:`launch` → connect to the GUI host and run until stopped
  * :class:`ChannelRelay` → the connection and event relay
  * :class:`RelaySettings` → relay configuration
"""

from .config import RelaySettings
from .connections import ChannelRelay, ConnectionState
from .control import EguiBuilder, Scene3DBuilder, WindowBuilder
from .protocol import NotConnectedError, RecordedEvent, RelayError, ReplyTimeoutError
from .runtime import egui, get_relay, launch

__all__ = [
    "egui",
    "launch",
    "get_relay",
    "ChannelRelay",
    "ConnectionState",
    "RelaySettings",
    "EguiBuilder",
    "WindowBuilder",
    "Scene3DBuilder",
    "RecordedEvent",
    "RelayError",
    "NotConnectedError",
    "ReplyTimeoutError",
]
