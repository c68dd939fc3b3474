import asyncio
import logging

from pioneer import EguiBuilder, launch
from pioneer import ops
from pioneer.core import start_tracked_task

logger = logging.getLogger("timeline")

TIMELINE_FILE = "timeline.json"


async def rotate_forever(builder: EguiBuilder, angle: float = 15, interval: float = 5.0) -> None:
    """Rotate the main scene by ``angle`` degrees every ``interval`` seconds."""
    while True:
        await asyncio.sleep(interval)
        builder.add_3d_scene("mainScene").rotate(angle)


async def build_ui(builder: EguiBuilder) -> None:
    """
    Build the timeline dashboard.

    :param builder: Builder bound to the connected relay.
    """
    scene = builder.add_3d_scene("mainScene")
    window = builder.add_window("Timeline Dashboard")

    async def stop_recording():
        recorded = await scene.stop_recording()
        logger.info("Recorded events: %s", recorded)
        ops.save_recorded_events(builder.relay, TIMELINE_FILE)
        logger.info("Saved to %s", TIMELINE_FILE)

    def load_recording():
        ops.load_recorded_events(builder.relay, TIMELINE_FILE)
        logger.info("Events loaded from %s", TIMELINE_FILE)

    (
        window
        .add_label("welcomeLabel")
        .set_text("Welcome to Pioneer eGUI with Timeline!")
        .add_button("recordButton", "Start Recording")
        .on_click(scene.start_recording)
        .add_button("stopRecordButton", "Stop Recording")
        .on_click(stop_recording)
        .add_button("loadButton", "Load Recording")
        .on_click(load_recording)
        .add_button("playbackButton", "Start Playback")
        .on_click(scene.start_playback)
        .add_button("stopPlaybackButton", "Stop Playback")
        .on_click(scene.stop_playback)
    )

    window.add_slider("volumeSlider", (0, 100)).set_value(50).on_change(
        lambda value: logger.info("Slider value changed to %s", value)
    )
    window.add_input("usernameInput").set_text("John Doe").on_input(
        lambda text: logger.info('Input text changed to "%s"', text)
    )
    window.add_checkbox("notificationsCheckbox").set_checked(True).on_toggle(
        lambda checked: logger.info("Checkbox toggled to %s", checked)
    )
    window.add_combo_box("themeCombo", ["Light", "Dark", "System"]).set_selected("Dark").on_change(
        lambda selected: logger.info("ComboBox selected option: %s", selected)
    )
    window.add_radio_group("languageRadio", ["English", "Spanish", "French"]).set_selected("English").on_change(
        lambda selected: logger.info("Radio group selected: %s", selected)
    )
    window.add_progress_bar("uploadProgress").set_progress(0).on_update(
        lambda value: logger.info("Progress bar updated to %s%%", value)
    )

    (
        scene
        .add_cube("cube1", 1.0)
        .add_sphere("sphere1", 0.5)
        .rotate(45)
        .on_rotate(lambda angle: logger.info("3D scene rotated by %s degrees", angle))
    )

    await builder.build()
    start_tracked_task(rotate_forever(builder), name="rotate-scene")


if __name__ == "__main__":
    try:
        asyncio.run(launch(build_ui))
    except KeyboardInterrupt:
        print("Runtime terminated.")
