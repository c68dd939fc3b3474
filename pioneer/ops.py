"""
Host command table.

Every function maps one host command onto one of the relay's two
primitives: :meth:`ChannelRelay.fire` (no reply expected) or
:meth:`ChannelRelay.request` (one correlated reply with a timeout).
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Sequence

from pydantic import ValidationError

from .protocol import RelayError, StopRecordingReply

if TYPE_CHECKING:
    from .connections import ChannelRelay

logger = logging.getLogger(__name__)

OP_SET_LABEL = "op_set_label"
OP_SET_BUTTON = "op_set_button"
OP_SET_SLIDER = "op_set_slider"
OP_SET_INPUT = "op_set_input"
OP_SET_CHECKBOX = "op_set_checkbox"
OP_SET_COMBO_BOX = "op_set_combo_box"
OP_SET_RADIO = "op_set_radio"
OP_SET_PROGRESS = "op_set_progress"
OP_ROTATE_3D = "op_rotate_3d"
OP_ADD_3D_OBJECT = "op_add_3d_object"
OP_START_RECORDING = "op_start_recording"
OP_STOP_RECORDING = "op_stop_recording"
OP_START_PLAYBACK = "op_start_playback"
OP_STOP_PLAYBACK = "op_stop_playback"
OP_SAVE_RECORDED_EVENTS = "op_save_recorded_events"
OP_LOAD_RECORDED_EVENTS = "op_load_recorded_events"


def add_window(relay: "ChannelRelay", title: str) -> None:
    """Announce a new window; the host shows its title in the label."""
    relay.fire(OP_SET_LABEL, text=f'Window titled "{title}"')
    logger.info('Window created: "%s"', title)


def set_label(relay: "ChannelRelay", text: str) -> None:
    relay.fire(OP_SET_LABEL, text=text)


def set_button(relay: "ChannelRelay", button_id: str, label: str) -> None:
    """Declare a button. The reference host ignores this command."""
    relay.fire(OP_SET_BUTTON, id=button_id, label=label)


def set_slider(relay: "ChannelRelay", value: float) -> None:
    relay.fire(OP_SET_SLIDER, value=value)


def set_input(relay: "ChannelRelay", text: str) -> None:
    relay.fire(OP_SET_INPUT, text=text)


def set_checkbox(relay: "ChannelRelay", checkbox_id: str, checked: bool) -> None:
    relay.fire(OP_SET_CHECKBOX, id=checkbox_id, checked=checked)


def set_combo_box(relay: "ChannelRelay", combo_id: str, selected: str, options: Sequence[str]) -> None:
    relay.fire(OP_SET_COMBO_BOX, id=combo_id, selected=selected, options=list(options))


def set_radio(relay: "ChannelRelay", radio_id: str, selected: str) -> None:
    relay.fire(OP_SET_RADIO, id=radio_id, selected=selected)


def set_progress(relay: "ChannelRelay", progress_id: str, value: float) -> None:
    relay.fire(OP_SET_PROGRESS, id=progress_id, value=value)


def rotate_3d(relay: "ChannelRelay", angle: float) -> None:
    relay.fire(OP_ROTATE_3D, angle=angle)


def add_3d_object(relay: "ChannelRelay", scene_id: str, object_id: str, object_type: str, size: float) -> None:
    relay.fire(
        OP_ADD_3D_OBJECT,
        scene_id=scene_id,
        object_id=object_id,
        object_type=object_type,
        size=size,
    )


def start_recording(relay: "ChannelRelay") -> None:
    relay.fire(OP_START_RECORDING)


async def stop_recording(relay: "ChannelRelay") -> List[Dict[str, Any]]:
    """
    Stop recording and return the events the host captured.

    Failures are logged and yield an empty list, which is also what
    the host answers when it was not recording.

    :param relay: Relay to send through.
    :return: The host's recorded event records.
    """
    try:
        reply = await relay.request(OP_STOP_RECORDING, result_type=StopRecordingReply)
    except (RelayError, ValidationError) as e:
        logger.error("Stop recording failed: %s", e)
        return []
    return reply.events


def start_playback(relay: "ChannelRelay") -> None:
    relay.fire(OP_START_PLAYBACK)


def stop_playback(relay: "ChannelRelay") -> None:
    relay.fire(OP_STOP_PLAYBACK)


def save_recorded_events(relay: "ChannelRelay", filename: str) -> None:
    """Ask the host to save its recorded events to ``filename``."""
    relay.fire(OP_SAVE_RECORDED_EVENTS, filename=str(filename))


def load_recorded_events(relay: "ChannelRelay", filename: str) -> None:
    """Ask the host to load recorded events from ``filename``."""
    relay.fire(OP_LOAD_RECORDED_EVENTS, filename=str(filename))
