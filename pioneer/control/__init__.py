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
from .window import EguiBuilder, WindowBuilder

__all__ = [
    "EguiBuilder",
    "WindowBuilder",
    "LabelBuilder",
    "ButtonBuilder",
    "SliderBuilder",
    "InputBuilder",
    "CheckboxBuilder",
    "ComboBoxBuilder",
    "RadioGroupBuilder",
    "ProgressBarBuilder",
    "Scene3DBuilder",
]
