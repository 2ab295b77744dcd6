"""
Layer data model for the paint engine.

Layer 0 is the sketch background: it references the externally supplied
sketch image, owns no buffer and can never be painted on. Layers 1..N are
paintable and each own a PixelBuffer of the sketch's size.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from PBN_Libs.constants import PAINT_LAYER_NAME_TEMPLATE, SKETCH_LAYER_ID, SKETCH_LAYER_NAME
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer


@dataclass(eq=False)
class Layer:
    """A single layer of the painting.

    Attributes:
        layer_id: Stable identifier (0 = sketch)
        name: Display name
        visible: Whether the layer contributes to the composite
        is_sketch: True for the background sketch layer
        buffer: Owned pixels (None for the sketch layer)
    """
    layer_id: int
    name: str
    visible: bool = True
    is_sketch: bool = False
    buffer: Optional[PixelBuffer] = None

    def __post_init__(self):
        if self.is_sketch and self.buffer is not None:
            raise ValueError("The sketch layer cannot own a paint buffer")

    @classmethod
    def sketch(cls) -> "Layer":
        return cls(SKETCH_LAYER_ID, SKETCH_LAYER_NAME, is_sketch=True)

    @classmethod
    def paintable(cls, layer_id: int) -> "Layer":
        if layer_id == SKETCH_LAYER_ID:
            raise ValueError(f"Layer id {SKETCH_LAYER_ID} is reserved for the sketch")
        return cls(layer_id, PAINT_LAYER_NAME_TEMPLATE.format(layer_id=layer_id))

    def reset(self, width: int, height: int) -> None:
        """Replace the buffer with a transparent one of the given size."""
        if not self.is_sketch:
            self.buffer = PixelBuffer.blank(width, height)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (excludes pixel data)."""
        return {
            "layer_id": self.layer_id,
            "name": self.name,
            "visible": self.visible,
            "is_sketch": self.is_sketch,
        }
