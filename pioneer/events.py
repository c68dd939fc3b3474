import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .core import start_tracked_task

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]


class EventEmitter:
    """
    Local publish/subscribe bus keyed by event name.

    Handlers run synchronously in registration order. A handler that
    returns an awaitable has it scheduled as a tracked task, so
    dispatch never waits on it. Exceptions raised by one handler are
    logged and do not stop the others.
    """

    def __init__(self):
        self._callbacks: Dict[str, List[Handler]] = {}

    def on(self, event: str, handler: Optional[Handler] = None):
        """
        Register a handler for ``event``.

        Can be called directly or used as a decorator::

            @emitter.on("slider_change")
            def changed(data): ...

        :param event: Event name to subscribe to.
        :param handler: Callback receiving the full event record.
        :return: The handler, or a decorator when ``handler`` is omitted.
        """
        if handler is not None:
            self._callbacks.setdefault(event, []).append(handler)
            return handler

        def decorator(func: Handler) -> Handler:
            self._callbacks.setdefault(event, []).append(func)
            return func

        return decorator

    def handlers(self, event: str) -> List[Handler]:
        """Return a copy of the handlers registered for ``event``."""
        return list(self._callbacks.get(event, []))

    def emit(self, event: str, data: Dict[str, Any]) -> int:
        """
        Deliver ``data`` to every handler registered for ``event``.

        :param event: Event name.
        :param data: Event record passed to each handler.
        :return: Number of handlers invoked.
        """
        handlers = self.handlers(event)
        for func in handlers:
            try:
                result = func(data)
                if inspect.isawaitable(result):
                    start_tracked_task(_guard(event, result))
            except Exception:
                logger.exception("Handler %r for '%s' failed", func, event)
        return len(handlers)


async def _guard(event: str, awaitable: Awaitable[Any]) -> None:
    try:
        await awaitable
    except Exception:
        logger.exception("Async handler for '%s' failed", event)
