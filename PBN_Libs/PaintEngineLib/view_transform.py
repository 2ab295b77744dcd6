"""
View transform between screen (container) space and canvas pixel space.

    canvas = (screen - offset) / scale
    screen = canvas * scale + offset
"""

from dataclasses import dataclass
from typing import Tuple

from PBN_Libs.constants import DEFAULT_SCALE, MAX_SCALE, MIN_SCALE, ZOOM_STEP

Point = Tuple[float, float]


@dataclass
class ViewTransform:
    """Zoom and pan state of the canvas view.

    Attributes:
        scale: Zoom factor (MIN_SCALE-MAX_SCALE)
        offset_x: Horizontal pan offset in screen pixels
        offset_y: Vertical pan offset in screen pixels
    """
    scale: float = DEFAULT_SCALE
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        if not (MIN_SCALE <= self.scale <= MAX_SCALE):
            raise ValueError(f"scale must be {MIN_SCALE}-{MAX_SCALE}, got {self.scale}")

    def screen_to_canvas(self, x: float, y: float) -> Point:
        """Map a container-relative point to canvas pixel coordinates."""
        return (x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale

    def canvas_to_screen(self, x: float, y: float) -> Point:
        return x * self.scale + self.offset_x, y * self.scale + self.offset_y

    def zoom_in(self) -> float:
        self.scale = min(round(self.scale + ZOOM_STEP, 2), MAX_SCALE)
        return self.scale

    def zoom_out(self) -> float:
        self.scale = max(round(self.scale - ZOOM_STEP, 2), MIN_SCALE)
        return self.scale

    def pan(self, delta_x: float, delta_y: float) -> None:
        self.offset_x += delta_x
        self.offset_y += delta_y

    def reset(self) -> None:
        self.scale = DEFAULT_SCALE
        self.offset_x = 0.0
        self.offset_y = 0.0
