"""
Project document models for Paint By Neon.

Classes:
    ProjectSettings: Brush, view and toggle settings stored with a project
    ProjectDocument: Everything needed to restore a painting session
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from PBN_Libs.constants import (
    CURRENT_VERSION,
    DEFAULT_BRUSH_COLOR,
    DEFAULT_BRUSH_OPACITY,
    DEFAULT_BRUSH_SIZE,
    DEFAULT_LAYER_ID,
    DEFAULT_SCALE,
    FIELD_BRUSH_COLOR,
    FIELD_BRUSH_OPACITY,
    FIELD_BRUSH_SIZE,
    FIELD_IS_COLOR_HIGHLIGHT_ENABLED,
    FIELD_IS_ERASER,
    FIELD_IS_PAN_MODE,
    FIELD_OFFSET_X,
    FIELD_OFFSET_Y,
    FIELD_SCALE,
    FIELD_TOOL_TYPE,
    TOOL_BRUSH,
    TOOL_ERASER,
    TOOL_TYPES,
)
from PBN_Libs.errors import VALIDATION_INVALID_FORMAT, ValidationError
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer


def _now_millis() -> int:
    return int(datetime.now().timestamp() * 1000)


@dataclass
class ProjectSettings:
    """Session settings persisted in the project's settings block."""
    brush_size: int = DEFAULT_BRUSH_SIZE
    brush_color: str = DEFAULT_BRUSH_COLOR
    brush_opacity: float = DEFAULT_BRUSH_OPACITY
    scale: float = DEFAULT_SCALE
    offset_x: float = 0.0
    offset_y: float = 0.0
    is_eraser: bool = False
    is_pan_mode: bool = False
    is_color_highlight_enabled: bool = False
    tool_type: Optional[str] = None

    @property
    def tool(self) -> str:
        """Tool to restore: toolType when present, otherwise from isEraser."""
        if self.tool_type in TOOL_TYPES:
            return self.tool_type
        return TOOL_ERASER if self.is_eraser else TOOL_BRUSH

    def to_dict(self) -> Dict[str, Any]:
        data = {
            FIELD_BRUSH_SIZE: self.brush_size,
            FIELD_BRUSH_COLOR: self.brush_color,
            FIELD_BRUSH_OPACITY: self.brush_opacity,
            FIELD_SCALE: self.scale,
            FIELD_OFFSET_X: self.offset_x,
            FIELD_OFFSET_Y: self.offset_y,
            FIELD_IS_ERASER: self.is_eraser,
            FIELD_IS_PAN_MODE: self.is_pan_mode,
            FIELD_IS_COLOR_HIGHLIGHT_ENABLED: self.is_color_highlight_enabled,
        }
        if self.tool_type is not None:
            data[FIELD_TOOL_TYPE] = self.tool_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectSettings":
        """Create from a settings block; missing fields take their defaults.

        Raises:
            ValidationError: If a numeric field is null or not a number
        """
        defaults = cls()
        tool_type = data.get(FIELD_TOOL_TYPE)
        try:
            brush_size = int(data.get(FIELD_BRUSH_SIZE, defaults.brush_size))
            brush_opacity = float(data.get(FIELD_BRUSH_OPACITY, defaults.brush_opacity))
            scale = float(data.get(FIELD_SCALE, defaults.scale))
            offset_x = float(data.get(FIELD_OFFSET_X, defaults.offset_x))
            offset_y = float(data.get(FIELD_OFFSET_Y, defaults.offset_y))
        except (TypeError, ValueError) as e:
            raise ValidationError(VALIDATION_INVALID_FORMAT, f"Invalid settings data: {e}") from e

        return cls(
            brush_size=brush_size,
            brush_color=str(data.get(FIELD_BRUSH_COLOR, defaults.brush_color)),
            brush_opacity=brush_opacity,
            scale=scale,
            offset_x=offset_x,
            offset_y=offset_y,
            is_eraser=bool(data.get(FIELD_IS_ERASER, defaults.is_eraser)),
            is_pan_mode=bool(data.get(FIELD_IS_PAN_MODE, defaults.is_pan_mode)),
            is_color_highlight_enabled=bool(
                data.get(FIELD_IS_COLOR_HIGHLIGHT_ENABLED, defaults.is_color_highlight_enabled)
            ),
            tool_type=str(tool_type) if tool_type is not None else None,
        )


@dataclass(eq=False)
class ProjectDocument:
    """A saved painting session.

    Attributes:
        original_image: Posterized color reference
        sketch_image: Grayscale sketch background
        palette: Dominant colors, most frequent first
        layers: Paint layer buffers by layer id
        layer_visibility: Visibility by layer id (sketch id 0 included)
        active_layer_id: Layer that receives strokes
        settings: Brush, view and toggle settings
        version: Writer version
        timestamp: Creation time in milliseconds since the epoch
    """
    original_image: PixelBuffer
    sketch_image: PixelBuffer
    palette: List[str] = field(default_factory=list)
    layers: Dict[int, PixelBuffer] = field(default_factory=dict)
    layer_visibility: Dict[int, bool] = field(default_factory=dict)
    active_layer_id: int = DEFAULT_LAYER_ID
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    version: str = CURRENT_VERSION
    timestamp: int = field(default_factory=_now_millis)

    @property
    def dimensions(self) -> Tuple[int, int]:
        """Canvas (width, height): the paint layer size, else the sketch size."""
        for layer_id in sorted(self.layers):
            return self.layers[layer_id].size
        return self.sketch_image.size
