import asyncio

import pytest

from pioneer.config import RelaySettings
from pioneer.control import EguiBuilder, WindowBuilder

from .conftest import RecordingRelay


@pytest.fixture
def window(recording_relay: RecordingRelay) -> WindowBuilder:
    built = EguiBuilder(recording_relay).add_window("Timeline Dashboard")
    recording_relay.sent.clear()
    return built


def emit(relay: RecordingRelay, record: dict) -> int:
    return relay.emitter.emit(record["type"], record)


def test_window_creation_announces_title(recording_relay: RecordingRelay) -> None:
    EguiBuilder(recording_relay).add_window("Timeline Dashboard")
    assert recording_relay.sent == [("op_set_label", {"text": 'Window titled "Timeline Dashboard"'})]


def test_label_set_text_returns_window(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    assert window.add_label("welcome").set_text("Welcome!") is window
    assert recording_relay.sent == [("op_set_label", {"text": "Welcome!"})]


def test_button_creation_sends_button_command(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    window.add_button("recordButton", "Start Recording")
    assert recording_relay.sent == [("op_set_button", {"id": "recordButton", "label": "Start Recording"})]


def test_shared_click_event_fires_every_button(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    clicks = []
    (
        window
        .add_button("record", "Record")
        .on_click(lambda: clicks.append("record"))
        .add_button("stop", "Stop")
        .on_click(lambda: clicks.append("stop"))
    )

    emit(recording_relay, {"type": "button_click"})

    assert clicks == ["record", "stop"]


def test_namespaced_events_only_fire_their_own_element() -> None:
    relay = RecordingRelay(RelaySettings(event_naming="namespaced"))
    window = EguiBuilder(relay).add_window("W")
    clicks, values = [], []
    window.add_button("record", "Record").on_click(lambda: clicks.append("record"))
    window.add_button("stop", "Stop").on_click(lambda: clicks.append("stop"))
    window.add_slider("volume", (0, 10)).on_change(values.append)

    emit(relay, {"type": "button_click"})
    emit(relay, {"type": "button_stop"})
    emit(relay, {"type": "slider_change", "value": 3})
    emit(relay, {"type": "slider_volume", "value": 4})

    assert clicks == ["stop"]
    assert values == [4]


def test_slider_starts_at_lower_bound(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    slider = window.add_slider("volumeSlider", (10, 100))
    assert slider.set_value(50) is slider
    assert recording_relay.sent == [
        ("op_set_slider", {"value": 10}),
        ("op_set_slider", {"value": 50}),
    ]


def test_slider_change_passes_value(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    values = []
    assert window.add_slider("volumeSlider", (0, 100)).on_change(values.append) is window

    emit(recording_relay, {"type": "slider_change", "value": 42})

    assert values == [42]


def test_malformed_event_payload_skips_handler(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    values = []
    window.add_slider("volumeSlider", (0, 100)).on_change(values.append)

    emit(recording_relay, {"type": "slider_change", "value": "loud"})
    emit(recording_relay, {"type": "slider_change"})

    assert values == []


def test_input_text_and_change(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    texts = []
    field = window.add_input("usernameInput")
    assert field.set_text("John Doe") is field
    field.on_input(texts.append)

    emit(recording_relay, {"type": "input_change", "text": "Jane"})

    assert recording_relay.sent == [("op_set_input", {"text": "John Doe"})]
    assert texts == ["Jane"]


def test_checkbox_uses_per_id_event(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    toggles = []
    window.add_checkbox("notifications").set_checked(True).on_toggle(toggles.append)

    emit(recording_relay, {"type": "checkbox_other", "checked": True})
    emit(recording_relay, {"type": "checkbox_notifications", "checked": False})

    assert recording_relay.sent == [("op_set_checkbox", {"id": "notifications", "checked": True})]
    assert toggles == [False]


def test_combo_box_preselects_first_option(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    selections = []
    options = ["Light", "Dark", "System"]
    window.add_combo_box("themeCombo", options).set_selected("Dark").on_change(selections.append)

    emit(recording_relay, {"type": "combo_themeCombo", "selected": "System"})

    assert recording_relay.sent == [
        ("op_set_combo_box", {"id": "themeCombo", "selected": "Light", "options": options}),
        ("op_set_combo_box", {"id": "themeCombo", "selected": "Dark", "options": options}),
    ]
    assert selections == ["System"]


def test_radio_group_preselects_first_option(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    selections = []
    window.add_radio_group("language", ["English", "French"]).set_selected("French").on_change(selections.append)

    emit(recording_relay, {"type": "radio_language", "selected": "English"})

    assert recording_relay.sent == [
        ("op_set_radio", {"id": "language", "selected": "English"}),
        ("op_set_radio", {"id": "language", "selected": "French"}),
    ]
    assert selections == ["English"]


def test_choice_widgets_need_options(window: WindowBuilder) -> None:
    with pytest.raises(ValueError):
        window.add_combo_box("empty", [])
    with pytest.raises(ValueError):
        window.add_radio_group("empty", [])


def test_progress_bar(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    updates = []
    assert window.add_progress_bar("upload").set_progress(0).on_update(updates.append) is window

    emit(recording_relay, {"type": "progress_upload", "value": 55.5})

    assert recording_relay.sent == [("op_set_progress", {"id": "upload", "value": 0})]
    assert updates == [55.5]


def test_scene_objects_and_rotation(recording_relay: RecordingRelay) -> None:
    angles = []
    scene = EguiBuilder(recording_relay).add_3d_scene("mainScene")
    result = scene.add_cube("cube1", 1.0).add_sphere("sphere1", 0.5).rotate(45).on_rotate(angles.append)

    emit(recording_relay, {"type": "rotate_3d", "angle": 15})

    assert result is scene
    assert recording_relay.sent == [
        ("op_add_3d_object", {"scene_id": "mainScene", "object_id": "cube1", "object_type": "cube", "size": 1.0}),
        ("op_add_3d_object", {"scene_id": "mainScene", "object_id": "sphere1", "object_type": "sphere", "size": 0.5}),
        ("op_rotate_3d", {"angle": 45}),
    ]
    assert angles == [15]


def test_window_scene_handle_shares_relay(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    window.add_3d_scene("mainScene").rotate(10)
    assert recording_relay.sent == [("op_rotate_3d", {"angle": 10})]


def test_recording_transport_commands(recording_relay: RecordingRelay) -> None:
    scene = EguiBuilder(recording_relay).add_3d_scene("mainScene")
    scene.start_recording().start_playback().stop_playback()
    assert recording_relay.names() == ["op_start_recording", "op_start_playback", "op_stop_playback"]


def test_save_and_load_forward_filename_only(recording_relay: RecordingRelay) -> None:
    scene = EguiBuilder(recording_relay).add_3d_scene("mainScene")
    scene.save_recorded_events("timeline.json").load_recorded_events("timeline.json")
    assert recording_relay.sent == [
        ("op_save_recorded_events", {"filename": "timeline.json"}),
        ("op_load_recorded_events", {"filename": "timeline.json"}),
    ]


@pytest.mark.asyncio
async def test_stop_recording_returns_reply_events(recording_relay: RecordingRelay) -> None:
    events = [{"eventType": "click", "componentId": "recordButton", "eventData": None, "timestamp": 3}]
    recording_relay.replies["op_stop_recording"] = {"type": "op_stop_recording", "events": events}

    recorded = await EguiBuilder(recording_relay).add_3d_scene("mainScene").stop_recording()

    assert recorded == events
    assert recording_relay.requests == ["op_stop_recording"]


@pytest.mark.asyncio
async def test_stop_recording_without_reply_returns_empty(recording_relay: RecordingRelay) -> None:
    assert await EguiBuilder(recording_relay).add_3d_scene("mainScene").stop_recording() == []


@pytest.mark.asyncio
async def test_async_click_handler_is_awaited(window: WindowBuilder, recording_relay: RecordingRelay) -> None:
    done = asyncio.Event()

    async def on_click():
        await asyncio.sleep(0)
        done.set()

    window.add_button("stopRecordButton", "Stop Recording").on_click(on_click)
    emit(recording_relay, {"type": "button_click"})

    await asyncio.wait_for(done.wait(), timeout=1.0)
