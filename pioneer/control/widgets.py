from typing import TYPE_CHECKING, Any, Callable, List, Sequence

from .. import ops
from .base import (
    ClickEvent,
    ElementBuilder,
    SelectionEvent,
    TextEvent,
    ToggleEvent,
    ValueEvent,
)

if TYPE_CHECKING:
    from .window import WindowBuilder


class WidgetBuilder(ElementBuilder):
    """An element owned by a window; ``on_*`` calls return that window."""

    def __init__(self, element_id: str, window: "WindowBuilder"):
        super().__init__(element_id, window.relay)
        self.window = window


class LabelBuilder(WidgetBuilder):

    def set_text(self, text: str) -> "WindowBuilder":
        """
        Set the label text.

        :param text: New text.
        :return: The owning window.
        """
        ops.set_label(self.relay, text)
        return self.window


class ButtonBuilder(WidgetBuilder):
    """
    A push button.

    Under the ``"shared"`` naming policy every button listens on the
    single ``button_click`` event, so any click fires every button's
    handler.
    """

    def __init__(self, element_id: str, label: str, window: "WindowBuilder"):
        super().__init__(element_id, window)
        self.label = label
        ops.set_button(self.relay, self.id, self.label)

    def on_click(self, handler: Callable[[], Any]) -> "WindowBuilder":
        """
        Call ``handler`` with no arguments when the button is clicked.

        :param handler: Callback, plain or ``async``.
        :return: The owning window.
        """
        self._listen(self._event_name("button_click", f"button_{self.id}"), ClickEvent, handler)
        return self.window


class SliderBuilder(WidgetBuilder):

    def __init__(self, element_id: str, value_range: Sequence[float], window: "WindowBuilder"):
        super().__init__(element_id, window)
        self.range = (value_range[0], value_range[1])
        ops.set_slider(self.relay, self.range[0])

    def set_value(self, value: float) -> "SliderBuilder":
        ops.set_slider(self.relay, value)
        return self

    def on_change(self, handler: Callable[[float], Any]) -> "WindowBuilder":
        """Call ``handler(value)`` when the slider moves."""
        self._listen(self._event_name("slider_change", f"slider_{self.id}"), ValueEvent, handler, "value")
        return self.window


class InputBuilder(WidgetBuilder):

    def set_text(self, text: str) -> "InputBuilder":
        ops.set_input(self.relay, text)
        return self

    def on_input(self, handler: Callable[[str], Any]) -> "WindowBuilder":
        """Call ``handler(text)`` when the input text changes."""
        self._listen(self._event_name("input_change", f"input_{self.id}"), TextEvent, handler, "text")
        return self.window


class CheckboxBuilder(WidgetBuilder):

    def set_checked(self, checked: bool) -> "CheckboxBuilder":
        ops.set_checkbox(self.relay, self.id, checked)
        return self

    def on_toggle(self, handler: Callable[[bool], Any]) -> "WindowBuilder":
        """Call ``handler(checked)`` on ``checkbox_<id>`` events."""
        self._listen(self._event_name(None, f"checkbox_{self.id}"), ToggleEvent, handler, "checked")
        return self.window


class ComboBoxBuilder(WidgetBuilder):
    """A drop-down with a fixed option list; the first option starts selected."""

    def __init__(self, element_id: str, options: Sequence[str], window: "WindowBuilder"):
        super().__init__(element_id, window)
        if not options:
            raise ValueError(f"Combo box '{element_id}' needs at least one option")
        self.options: List[str] = list(options)
        ops.set_combo_box(self.relay, self.id, self.options[0], self.options)

    def set_selected(self, selected: str) -> "ComboBoxBuilder":
        ops.set_combo_box(self.relay, self.id, selected, self.options)
        return self

    def on_change(self, handler: Callable[[str], Any]) -> "WindowBuilder":
        """Call ``handler(selected)`` on ``combo_<id>`` events."""
        self._listen(self._event_name(None, f"combo_{self.id}"), SelectionEvent, handler, "selected")
        return self.window


class RadioGroupBuilder(WidgetBuilder):

    def __init__(self, element_id: str, options: Sequence[str], window: "WindowBuilder"):
        super().__init__(element_id, window)
        if not options:
            raise ValueError(f"Radio group '{element_id}' needs at least one option")
        self.options: List[str] = list(options)
        ops.set_radio(self.relay, self.id, self.options[0])

    def set_selected(self, selected: str) -> "RadioGroupBuilder":
        ops.set_radio(self.relay, self.id, selected)
        return self

    def on_change(self, handler: Callable[[str], Any]) -> "WindowBuilder":
        """Call ``handler(selected)`` on ``radio_<id>`` events."""
        self._listen(self._event_name(None, f"radio_{self.id}"), SelectionEvent, handler, "selected")
        return self.window


class ProgressBarBuilder(WidgetBuilder):

    def set_progress(self, value: float) -> "ProgressBarBuilder":
        ops.set_progress(self.relay, self.id, value)
        return self

    def on_update(self, handler: Callable[[float], Any]) -> "WindowBuilder":
        """Call ``handler(value)`` on ``progress_<id>`` events."""
        self._listen(self._event_name(None, f"progress_{self.id}"), ValueEvent, handler, "value")
        return self.window
