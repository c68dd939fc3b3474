import asyncio
import logging
import signal
import sys
from typing import Any, Callable, Coroutine, Optional, Set

logger = logging.getLogger(__name__)

#: Background tasks started by the system.
background_tasks: Set[asyncio.Task] = set()


def start_tracked_task(coro: Coroutine, name: Optional[str] = None) -> asyncio.Task:
    """
    Start and track an asyncio task.

    The task is added to the global ``background_tasks`` set
    and automatically removed once completed.

    :param coro: The coroutine to execute as a task.
    :param name: Optional task name, shown in debug output.
    :return: The created asyncio task.
    """
    task = asyncio.create_task(coro, name=name)
    background_tasks.add(task)
    task.add_done_callback(background_tasks.discard)
    return task


async def shutdown_all_tasks() -> None:
    """
    Cancel and await all tracked background tasks.

    Ensures that all running tasks are stopped gracefully
    before shutdown completes. The calling task is never cancelled.
    """
    current = asyncio.current_task()
    tasks = [t for t in background_tasks if t is not current]
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def install_signal_handlers(on_signal: Optional[Callable[[], Any]] = None) -> None:
    """
    Install signal handlers for graceful shutdown.

    On Unix systems, ``SIGINT`` and ``SIGTERM`` are bound to
    ``on_signal``, or to :func:`shutdown_all_tasks` when none is given.
    On Windows, a warning is logged as signal handlers are not supported.

    .. note::
       On Windows, shutdown must be triggered manually.
    """
    if sys.platform == "win32":
        logger.warning("Signal handlers are not supported on Windows, shutdown must be manual.")
        return

    loop = asyncio.get_running_loop()
    callback = on_signal or (lambda: asyncio.create_task(shutdown_all_tasks()))
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, callback)


def remove_signal_handlers() -> None:
    """Restore default ``SIGINT`` and ``SIGTERM`` handling."""
    if sys.platform == "win32":
        return

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.remove_signal_handler(sig)
