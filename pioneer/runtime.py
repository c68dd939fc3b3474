import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

from .config import RelaySettings
from .connections import ChannelRelay
from .control.window import EguiBuilder
from .core import (
    install_signal_handlers,
    remove_signal_handlers,
    shutdown_all_tasks,
    start_tracked_task,
)

logger = logging.getLogger(__name__)

_default_relay: Optional[ChannelRelay] = None


def get_relay(settings: Optional[RelaySettings] = None) -> ChannelRelay:
    """
    Return the process-wide relay, creating it on first use.

    :param settings: Settings for the relay. Only used on first call;
        defaults to :meth:`RelaySettings.from_env`. Different settings
        passed later are ignored with a warning.
    :return: The shared relay.
    """
    global _default_relay
    if _default_relay is None:
        _default_relay = ChannelRelay(settings or RelaySettings.from_env())
    elif settings is not None and settings != _default_relay.settings:
        logger.warning("Relay already created, ignoring new settings: %s", settings)
    return _default_relay


def egui(relay: Optional[ChannelRelay] = None) -> EguiBuilder:
    """Start a builder chain on ``relay`` or the process-wide relay."""
    return EguiBuilder(relay or get_relay())


def configure_logging(level: str) -> None:
    """Install a basic stderr handler unless the application already has one."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


async def launch(
    build: Optional[Callable[[EguiBuilder], Any]] = None,
    settings: Optional[RelaySettings] = None,
    relay: Optional[ChannelRelay] = None,
) -> None:
    """
    Connect to the GUI host, build the UI and keep the process alive.

    This function:
      * Configures logging and installs signal handlers.
      * Starts the relay's reconnect loop as a tracked task.
      * Waits for the first connection, then calls ``build``.
        A signal received before the host answers skips ``build``.
      * Runs until cancelled or signalled, then stops the relay
        and all tracked tasks.

    :param build: Callback receiving an :class:`EguiBuilder`; may be
        ``async``.
    :param settings: Relay settings. Defaults to the environment.
    :param relay: Relay to run. Defaults to the process-wide relay.
    :return: None
    """
    relay = relay or get_relay(settings)
    configure_logging(relay.settings.log_level)

    done = asyncio.Event()
    install_signal_handlers(done.set)

    start_tracked_task(relay.run(), name="pioneer-relay")
    stopped = asyncio.create_task(done.wait())
    connected = asyncio.create_task(relay.wait_connected())
    try:
        await asyncio.wait({stopped, connected}, return_when=asyncio.FIRST_COMPLETED)
        if not done.is_set():
            if build is not None:
                result = build(EguiBuilder(relay))
                if inspect.isawaitable(result):
                    await result
            await stopped
    finally:
        for task in (stopped, connected):
            task.cancel()
        remove_signal_handlers()
        await relay.stop()
        await shutdown_all_tasks()
        logger.info("Runtime terminated.")
