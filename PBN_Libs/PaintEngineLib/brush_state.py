"""
Brush configuration for Paint By Neon.
"""

from dataclasses import dataclass

from PBN_Libs.constants import (
    DEFAULT_BRUSH_COLOR,
    DEFAULT_BRUSH_OPACITY,
    DEFAULT_BRUSH_SIZE,
    MAX_BRUSH_SIZE,
    MIN_BRUSH_SIZE,
    TOOL_BRUSH,
    TOOL_ERASER,
    TOOL_SPRAY,
    TOOL_TYPES,
)
from PBN_Libs.ImageEditingLib.image_models import RgbColor, hex_to_rgb


@dataclass
class BrushState:
    """Tool settings applied to strokes.

    Attributes:
        tool: 'brush', 'spray' or 'eraser'
        size: Stroke diameter in canvas pixels (1-50)
        color: Paint color as '#RRGGBB'
        opacity: Stroke opacity (0.0-1.0)
    """
    tool: str = TOOL_BRUSH
    size: int = DEFAULT_BRUSH_SIZE
    color: str = DEFAULT_BRUSH_COLOR
    opacity: float = DEFAULT_BRUSH_OPACITY

    def __post_init__(self):
        """Validate brush parameters."""
        if self.tool not in TOOL_TYPES:
            raise ValueError(f"Unsupported tool: {self.tool}")

        if not (MIN_BRUSH_SIZE <= self.size <= MAX_BRUSH_SIZE):
            raise ValueError(
                f"size must be {MIN_BRUSH_SIZE}-{MAX_BRUSH_SIZE}, got {self.size}"
            )

        if not (0.0 <= self.opacity <= 1.0):
            raise ValueError(f"opacity must be 0.0-1.0, got {self.opacity}")

        # Normalizes and validates the color string
        self.color = "#{:02X}{:02X}{:02X}".format(*hex_to_rgb(self.color))

    @property
    def rgb(self) -> RgbColor:
        return hex_to_rgb(self.color)

    @property
    def is_eraser(self) -> bool:
        return self.tool == TOOL_ERASER

    @property
    def is_spray(self) -> bool:
        return self.tool == TOOL_SPRAY
