import logging
from typing import TYPE_CHECKING, Sequence

from .. import ops
from .base import ElementBuilder
from .scene import Scene3DBuilder
from .widgets import (
    ButtonBuilder,
    CheckboxBuilder,
    ComboBoxBuilder,
    InputBuilder,
    LabelBuilder,
    ProgressBarBuilder,
    RadioGroupBuilder,
    SliderBuilder,
)

if TYPE_CHECKING:
    from ..connections import ChannelRelay

logger = logging.getLogger(__name__)


class WindowBuilder(ElementBuilder):
    """
    Fluent builder for one host window.

    Creating the window announces it to the host. Each ``add_*``
    method returns the new element's builder; the element's ``on_*``
    methods return this window again so the chain can continue.
    """

    def __init__(self, title: str, relay: "ChannelRelay"):
        """
        Create the window and notify the host.

        :param title: Window title.
        :param relay: Relay used for every command of this window.
        """
        super().__init__("window", relay)
        self.title = title
        ops.add_window(self.relay, title)

    def add_label(self, label_id: str) -> LabelBuilder:
        """Add a text label."""
        return LabelBuilder(label_id, self)

    def add_button(self, button_id: str, label: str) -> ButtonBuilder:
        """
        Add a push button.

        :param button_id: Identifier of the button.
        :param label: Caption shown on the button.
        :return: Builder for the new button.
        """
        return ButtonBuilder(button_id, label, self)

    def add_slider(self, slider_id: str, value_range: Sequence[float]) -> SliderBuilder:
        """
        Add a slider; it starts at the lower bound of ``value_range``.

        :param slider_id: Identifier of the slider.
        :param value_range: ``(low, high)`` bounds.
        :return: Builder for the new slider.
        """
        return SliderBuilder(slider_id, value_range, self)

    def add_input(self, input_id: str) -> InputBuilder:
        """Add a single-line text input."""
        return InputBuilder(input_id, self)

    def add_checkbox(self, checkbox_id: str) -> CheckboxBuilder:
        """Add a checkbox."""
        return CheckboxBuilder(checkbox_id, self)

    def add_combo_box(self, combo_id: str, options: Sequence[str]) -> ComboBoxBuilder:
        """Add a combo box with ``options``; the first one is pre-selected."""
        return ComboBoxBuilder(combo_id, options, self)

    def add_radio_group(self, radio_id: str, options: Sequence[str]) -> RadioGroupBuilder:
        """Add a radio group with ``options``; the first one is pre-selected."""
        return RadioGroupBuilder(radio_id, options, self)

    def add_progress_bar(self, progress_id: str) -> ProgressBarBuilder:
        """Add a progress bar."""
        return ProgressBarBuilder(progress_id, self)

    def add_3d_scene(self, scene_id: str) -> Scene3DBuilder:
        """Get a handle on the 3-D scene ``scene_id``."""
        return Scene3DBuilder(scene_id, self.relay)


class EguiBuilder:
    """Entry point of a builder chain, bound to one relay."""

    def __init__(self, relay: "ChannelRelay"):
        self.relay = relay

    def add_window(self, title: str) -> WindowBuilder:
        """Create a window titled ``title``."""
        return WindowBuilder(title, self.relay)

    def add_3d_scene(self, scene_id: str) -> Scene3DBuilder:
        """Get a handle on the 3-D scene ``scene_id``."""
        return Scene3DBuilder(scene_id, self.relay)

    async def build(self) -> None:
        """Wait for every queued command to be handled."""
        await self.relay.flush()
        logger.info("UI build is complete")
