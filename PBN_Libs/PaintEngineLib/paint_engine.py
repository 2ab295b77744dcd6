"""
Raster paint engine for Paint By Neon.

Maintains the sketch background and N same-sized paintable layers, applies
stroke primitives to the active layer and composites visible layers for
display.

Lifecycle:
    UNINITIALIZED --load_sketch--> SKETCH_LOADED --mark_ready--> READY
                                   SKETCH_LOADED --restore_layers--> LAYERS_RESTORED
                                   LAYERS_RESTORED --mark_ready--> READY
    load_sketch is allowed from every state and starts over.

Strokes require READY. The caller pushes one history snapshot at each
transition into READY, so a sketch or restored layer set is never
initialized twice.

Classes:
    EngineState: Lifecycle states
    PaintEngine: Layers, lifecycle and stroke application
"""

import logging
import random
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from PBN_Libs.constants import DEFAULT_LAYER_ID, DEFAULT_PAINT_LAYER_COUNT, SKETCH_LAYER_ID
from PBN_Libs.errors import SessionStateError
from PBN_Libs.ImageEditingLib.export_ops import flatten_layers
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.PaintEngineLib.brush_state import BrushState
from PBN_Libs.PaintEngineLib.history_manager import HistorySnapshot
from PBN_Libs.PaintEngineLib.layer_models import Layer
from PBN_Libs.PaintEngineLib.stroke_ops import Point, draw_line_stroke, draw_spray_stroke

logger = logging.getLogger(__name__)


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    SKETCH_LOADED = "sketch_loaded"
    LAYERS_RESTORED = "layers_restored"
    READY = "ready"


_TRANSITIONS = {
    EngineState.UNINITIALIZED: {EngineState.SKETCH_LOADED},
    EngineState.SKETCH_LOADED: {
        EngineState.SKETCH_LOADED,
        EngineState.LAYERS_RESTORED,
        EngineState.READY,
    },
    EngineState.LAYERS_RESTORED: {EngineState.SKETCH_LOADED, EngineState.READY},
    EngineState.READY: {EngineState.SKETCH_LOADED},
}


class PaintEngine:
    """
    Multi-layer raster painting surface.

    Example:
        >>> engine = PaintEngine(layer_count=2)
        >>> engine.load_sketch(sketch)
        >>> engine.mark_ready()
        >>> engine.draw_line((0, 0), (10, 0), BrushState(color="#0000FF"))
        >>> display = engine.composite()
    """

    def __init__(self, layer_count: int = DEFAULT_PAINT_LAYER_COUNT):
        if layer_count < 1:
            raise ValueError(f"layer_count must be >= 1, got {layer_count}")

        self._sketch_layer = Layer.sketch()
        self._layers: Dict[int, Layer] = {
            layer_id: Layer.paintable(layer_id) for layer_id in range(1, layer_count + 1)
        }
        self._sketch: Optional[PixelBuffer] = None
        self._state = EngineState.UNINITIALIZED
        self._active_layer_id = DEFAULT_LAYER_ID

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EngineState.READY

    def _transition(self, target: EngineState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise SessionStateError(
                f"Cannot move from {self._state.value} to {target.value}"
            )
        logger.debug(f"Engine state {self._state.value} -> {target.value}")
        self._state = target

    def _require_ready(self) -> None:
        if self._state is not EngineState.READY:
            raise SessionStateError(f"Engine is not ready (state: {self._state.value})")

    def load_sketch(self, sketch: PixelBuffer) -> None:
        """
        Load a sketch and reset every paintable layer to transparent.

        Layer dimensions are fixed to the sketch size until the next sketch
        is loaded.
        """
        if sketch.width == 0 or sketch.height == 0:
            raise ValueError(f"Sketch has no pixels: {sketch.width}x{sketch.height}")

        self._transition(EngineState.SKETCH_LOADED)
        self._sketch = sketch.copy()
        for layer in self._layers.values():
            layer.reset(sketch.width, sketch.height)
        logger.debug(f"Loaded sketch {sketch.width}x{sketch.height}")

    def restore_layers(self, buffers: Mapping[int, PixelBuffer]) -> None:
        """
        Replace layer buffers with saved data after load_sketch.

        Layers absent from buffers stay empty.

        Raises:
            KeyError: If a layer id is unknown
            ValueError: If a buffer size differs from the sketch size
        """
        for layer_id, buffer in buffers.items():
            if layer_id not in self._layers:
                raise KeyError(f"Unknown paint layer id: {layer_id}")
            if buffer.size != self.size:
                raise ValueError(
                    f"Layer {layer_id} size {buffer.size} does not match canvas {self.size}"
                )

        self._transition(EngineState.LAYERS_RESTORED)
        for layer_id, buffer in buffers.items():
            self._layers[layer_id].buffer = buffer.copy()
        logger.debug(f"Restored layers {sorted(buffers)}")

    def mark_ready(self) -> None:
        self._transition(EngineState.READY)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    @property
    def size(self) -> Tuple[int, int]:
        if self._sketch is None:
            return 0, 0
        return self._sketch.size

    @property
    def sketch(self) -> Optional[PixelBuffer]:
        return self._sketch

    @property
    def active_layer_id(self) -> int:
        return self._active_layer_id

    def set_active_layer(self, layer_id: int) -> None:
        if layer_id == SKETCH_LAYER_ID:
            raise ValueError("The sketch layer cannot be painted on")
        if layer_id not in self._layers:
            raise ValueError(f"Unknown paint layer id: {layer_id}")
        self._active_layer_id = layer_id

    def get_layer(self, layer_id: int) -> Layer:
        if layer_id == SKETCH_LAYER_ID:
            return self._sketch_layer
        if layer_id not in self._layers:
            raise KeyError(f"Unknown layer id: {layer_id}")
        return self._layers[layer_id]

    def paint_layers(self) -> List[Layer]:
        """Paintable layers in ascending id order."""
        return [self._layers[layer_id] for layer_id in sorted(self._layers)]

    def layer_ids(self) -> List[int]:
        return sorted(self._layers)

    def set_layer_visibility(self, layer_id: int, visible: bool) -> None:
        self.get_layer(layer_id).visible = bool(visible)

    def layer_visibility(self) -> Dict[int, bool]:
        """Visibility of every layer, sketch included."""
        visibility = {SKETCH_LAYER_ID: self._sketch_layer.visible}
        for layer in self.paint_layers():
            visibility[layer.layer_id] = layer.visible
        return visibility

    def layer_buffers(self) -> Dict[int, PixelBuffer]:
        """Copies of every paintable layer buffer."""
        self._require_loaded()
        return {layer.layer_id: layer.buffer.copy() for layer in self.paint_layers()}

    def visible_layer_buffers(self) -> List[PixelBuffer]:
        """Live buffers of visible paintable layers in ascending id order."""
        return [
            layer.buffer
            for layer in self.paint_layers()
            if layer.visible and layer.buffer is not None
        ]

    def clear_layer(self, layer_id: int) -> None:
        """Reset one paintable layer to transparent."""
        self._require_ready()
        if layer_id == SKETCH_LAYER_ID:
            raise ValueError("The sketch layer cannot be cleared")
        width, height = self.size
        self.get_layer(layer_id).reset(width, height)

    def clear_all_layers(self) -> None:
        self._require_ready()
        width, height = self.size
        for layer in self._layers.values():
            layer.reset(width, height)

    def _require_loaded(self) -> None:
        if self._sketch is None:
            raise SessionStateError("No sketch loaded")

    # ------------------------------------------------------------------
    # Strokes
    # ------------------------------------------------------------------

    def _active_buffer(self) -> PixelBuffer:
        self._require_ready()
        return self._layers[self._active_layer_id].buffer

    def draw_line(self, start: Point, end: Point, brush: BrushState) -> int:
        """Draw (or erase, for the eraser tool) a segment on the active layer."""
        return draw_line_stroke(
            self._active_buffer(),
            start,
            end,
            brush.rgb,
            brush.size,
            brush.opacity,
            erase=brush.is_eraser,
        )

    def draw_spray(
        self,
        point: Point,
        brush: BrushState,
        rng: Optional[random.Random] = None,
    ) -> int:
        """Apply one spray burst on the active layer."""
        return draw_spray_stroke(
            self._active_buffer(),
            point,
            brush.rgb,
            brush.size,
            brush.opacity,
            rng=rng,
        )

    # ------------------------------------------------------------------
    # Snapshots and display
    # ------------------------------------------------------------------

    def capture_snapshot(self) -> HistorySnapshot:
        """Capture every paintable layer."""
        self._require_loaded()
        return HistorySnapshot(
            {layer.layer_id: layer.buffer for layer in self.paint_layers()}
        )

    def restore_snapshot(self, snapshot: HistorySnapshot) -> None:
        """Overwrite every layer present in the snapshot with a writable copy."""
        self._require_loaded()
        for layer_id in snapshot:
            self.get_layer(layer_id).buffer = snapshot[layer_id].copy()

    def composite(self, include_sketch: bool = True) -> PixelBuffer:
        """
        Render the display surface.

        Order: sketch (if visible and included), then visible paintable
        layers in ascending id order. Hidden layers contribute nothing.
        """
        self._require_loaded()
        background = None
        if include_sketch and self._sketch_layer.visible:
            background = self._sketch
        return flatten_layers(background, self.visible_layer_buffers(), size=self.size)
