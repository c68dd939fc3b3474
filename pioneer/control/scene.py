from typing import TYPE_CHECKING, Any, Callable, Dict, List

from .. import ops
from .base import ElementBuilder, RotationEvent

if TYPE_CHECKING:
    from ..connections import ChannelRelay


class Scene3DBuilder(ElementBuilder):
    """
    Handle for a 3-D scene rendered by the host.

    Every method except :meth:`stop_recording` fires a command and
    returns the scene itself, so calls can be chained.
    """

    def __init__(self, scene_id: str, relay: "ChannelRelay"):
        super().__init__(scene_id, relay)

    def add_cube(self, object_id: str, size: float) -> "Scene3DBuilder":
        """
        Add a cube to the scene.

        :param object_id: Identifier of the new object.
        :param size: Edge length.
        :return: Self.
        """
        ops.add_3d_object(self.relay, self.id, object_id, "cube", size)
        return self

    def add_sphere(self, object_id: str, radius: float) -> "Scene3DBuilder":
        """
        Add a sphere to the scene.

        :param object_id: Identifier of the new object.
        :param radius: Sphere radius.
        :return: Self.
        """
        ops.add_3d_object(self.relay, self.id, object_id, "sphere", radius)
        return self

    def rotate(self, angle: float) -> "Scene3DBuilder":
        """Rotate the scene by ``angle`` degrees around the vertical axis."""
        ops.rotate_3d(self.relay, angle)
        return self

    def on_rotate(self, handler: Callable[[float], Any]) -> "Scene3DBuilder":
        """Call ``handler(angle)`` when the host reports a rotation."""
        self._listen(self._event_name("rotate_3d", f"rotate_3d_{self.id}"), RotationEvent, handler, "angle")
        return self

    def start_recording(self) -> "Scene3DBuilder":
        ops.start_recording(self.relay)
        return self

    async def stop_recording(self) -> List[Dict[str, Any]]:
        """
        Stop recording and wait for the host's recorded events.

        The wait is bounded by ``settings.reply_timeout``; on timeout
        or a dropped connection an empty list is returned.

        :return: Recorded event records as sent by the host.
        """
        return await ops.stop_recording(self.relay)

    def start_playback(self) -> "Scene3DBuilder":
        ops.start_playback(self.relay)
        return self

    def stop_playback(self) -> "Scene3DBuilder":
        ops.stop_playback(self.relay)
        return self

    def save_recorded_events(self, filename: str) -> "Scene3DBuilder":
        """Have the host write its recorded events to ``filename``."""
        ops.save_recorded_events(self.relay, filename)
        return self

    def load_recorded_events(self, filename: str) -> "Scene3DBuilder":
        """Have the host read recorded events from ``filename``."""
        ops.load_recorded_events(self.relay, filename)
        return self
