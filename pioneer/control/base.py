import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Type

from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from ..connections import ChannelRelay

logger = logging.getLogger(__name__)


class ClickEvent(BaseModel):
    pass


class ValueEvent(BaseModel):
    value: float


class TextEvent(BaseModel):
    text: str


class ToggleEvent(BaseModel):
    checked: bool


class SelectionEvent(BaseModel):
    selected: str


class RotationEvent(BaseModel):
    angle: float


class ElementBuilder:
    """
    Handle for one UI element in a builder chain.

    Carries only the element id and the relay used to address it.
    """

    def __init__(self, element_id: str, relay: "ChannelRelay"):
        self.id = element_id
        self.relay = relay

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    def _event_name(self, shared: Optional[str], namespaced: str) -> str:
        """
        Pick the event name this element listens on.

        :param shared: Name shared by all elements of this kind, if the
            host uses one.
        :param namespaced: Name carrying this element's id.
        :return: ``shared`` under the ``"shared"`` naming policy,
            ``namespaced`` otherwise.
        """
        if shared is not None and self.relay.settings.event_naming == "shared":
            return shared
        return namespaced

    def _listen(
        self,
        event: str,
        model: Type[BaseModel],
        handler: Callable[..., Any],
        field: Optional[str] = None,
    ) -> None:
        """
        Subscribe ``handler`` to ``event``, passing it one validated field.

        :param event: Event name.
        :param model: Pydantic model the event record must satisfy.
        :param handler: Application callback.
        :param field: Model field passed to ``handler``; ``None`` calls it
            without arguments.
        """

        def relay_handler(data):
            try:
                payload = model.model_validate(data)
            except ValidationError as e:
                logger.warning("Ignoring malformed '%s' event for %s: %s", event, self.id, e)
                return None
            if field is None:
                return handler()
            return handler(getattr(payload, field))

        self.relay.subscribe(event, relay_handler)
