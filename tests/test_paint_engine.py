"""
Unit tests for paint_engine and layer_models modules.

Tests the lifecycle state machine, layer management, strokes and
compositing order.
"""

import random

import pytest

from PBN_Libs.errors import SessionStateError
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.PaintEngineLib.brush_state import BrushState
from PBN_Libs.PaintEngineLib.layer_models import Layer
from PBN_Libs.PaintEngineLib.paint_engine import EngineState, PaintEngine

BLUE_BRUSH = BrushState(color="#0000FF", size=4, opacity=1.0)


@pytest.fixture
def stacked_engine(sketch_buffer):
    """Layer 1 fully red, layer 2 with a single blue pixel at (5, 5)."""
    blue_dot = PixelBuffer.blank(40, 30)
    blue_dot.pixels[5, 5] = (0, 0, 255, 255)

    engine = PaintEngine(layer_count=2)
    engine.load_sketch(sketch_buffer)
    engine.restore_layers({
        1: PixelBuffer.filled(40, 30, (255, 0, 0, 255)),
        2: blue_dot,
    })
    engine.mark_ready()
    return engine


class TestLayerModel:
    """Tests for the Layer dataclass."""

    def test_sketch_layer(self):
        layer = Layer.sketch()

        assert layer.layer_id == 0
        assert layer.is_sketch
        assert layer.buffer is None

    def test_sketch_layer_owns_no_buffer(self):
        layer = Layer.sketch()
        layer.reset(4, 4)

        assert layer.buffer is None

    def test_paintable_layer(self):
        layer = Layer.paintable(2)
        layer.reset(4, 3)

        assert layer.name == "Layer 2"
        assert layer.buffer.size == (4, 3)
        assert layer.to_dict() == {
            "layer_id": 2,
            "name": "Layer 2",
            "visible": True,
            "is_sketch": False,
        }

    def test_id_zero_reserved(self):
        with pytest.raises(ValueError):
            Layer.paintable(0)


class TestLifecycle:
    """Tests for the engine lifecycle."""

    def test_starts_uninitialized(self):
        engine = PaintEngine()

        assert engine.state is EngineState.UNINITIALIZED
        assert engine.size == (0, 0)
        assert engine.layer_ids() == [1, 2, 3]

    def test_cannot_draw_before_ready(self, sketch_buffer):
        engine = PaintEngine()
        with pytest.raises(SessionStateError):
            engine.draw_line((0, 0), (1, 1), BLUE_BRUSH)

        engine.load_sketch(sketch_buffer)
        with pytest.raises(SessionStateError):
            engine.draw_line((0, 0), (1, 1), BLUE_BRUSH)

    def test_cannot_mark_ready_without_sketch(self):
        with pytest.raises(SessionStateError):
            PaintEngine().mark_ready()

    def test_load_sketch_sizes_layers(self, sketch_buffer):
        engine = PaintEngine()
        engine.load_sketch(sketch_buffer)

        assert engine.state is EngineState.SKETCH_LOADED
        assert engine.size == (40, 30)
        assert all(layer.buffer.is_transparent() for layer in engine.paint_layers())

    def test_restore_then_ready(self, stacked_engine):
        assert stacked_engine.state is EngineState.READY
        assert stacked_engine.get_layer(1).buffer.get_pixel(0, 0) == (255, 0, 0, 255)

    def test_restore_only_after_load(self, ready_engine):
        with pytest.raises(SessionStateError):
            ready_engine.restore_layers({1: PixelBuffer.blank(40, 30)})

    def test_restore_unknown_layer(self, sketch_buffer):
        engine = PaintEngine(layer_count=2)
        engine.load_sketch(sketch_buffer)

        with pytest.raises(KeyError):
            engine.restore_layers({5: PixelBuffer.blank(40, 30)})
        assert engine.state is EngineState.SKETCH_LOADED

    def test_restore_wrong_size(self, sketch_buffer):
        engine = PaintEngine()
        engine.load_sketch(sketch_buffer)

        with pytest.raises(ValueError):
            engine.restore_layers({1: PixelBuffer.blank(10, 10)})

    def test_reload_resets_layers(self, stacked_engine, sketch_buffer):
        stacked_engine.load_sketch(sketch_buffer)

        assert stacked_engine.state is EngineState.SKETCH_LOADED
        assert stacked_engine.get_layer(1).buffer.is_transparent()

    def test_empty_sketch_rejected(self):
        with pytest.raises(ValueError):
            PaintEngine().load_sketch(PixelBuffer.blank(0, 0))

    def test_layer_count_validated(self):
        with pytest.raises(ValueError):
            PaintEngine(layer_count=0)


class TestLayers:
    """Tests for layer selection and visibility."""

    def test_sketch_cannot_be_active(self, ready_engine):
        with pytest.raises(ValueError):
            ready_engine.set_active_layer(0)

    def test_unknown_layer_cannot_be_active(self, ready_engine):
        with pytest.raises(ValueError):
            ready_engine.set_active_layer(9)

    def test_visibility_includes_sketch(self, ready_engine):
        ready_engine.set_layer_visibility(0, False)
        ready_engine.set_layer_visibility(2, False)

        assert ready_engine.layer_visibility() == {0: False, 1: True, 2: False}

    def test_get_unknown_layer(self, ready_engine):
        with pytest.raises(KeyError):
            ready_engine.get_layer(9)

    def test_layer_buffers_are_copies(self, stacked_engine):
        buffers = stacked_engine.layer_buffers()
        buffers[1].pixels[:] = 0

        assert stacked_engine.get_layer(1).buffer.get_pixel(0, 0) == (255, 0, 0, 255)

    def test_clear_layer(self, stacked_engine):
        stacked_engine.clear_layer(1)

        assert stacked_engine.get_layer(1).buffer.is_transparent()
        assert not stacked_engine.get_layer(2).buffer.is_transparent()

    def test_clear_sketch_rejected(self, stacked_engine):
        with pytest.raises(ValueError):
            stacked_engine.clear_layer(0)

    def test_clear_all_layers(self, stacked_engine):
        stacked_engine.clear_all_layers()

        assert all(layer.buffer.is_transparent() for layer in stacked_engine.paint_layers())


class TestStrokes:
    """Tests for strokes on the active layer."""

    def test_draw_line_hits_active_layer_only(self, ready_engine):
        ready_engine.set_active_layer(2)

        ready_engine.draw_line((0, 0), (10, 0), BLUE_BRUSH)

        assert ready_engine.get_layer(1).buffer.is_transparent()
        assert ready_engine.get_layer(2).buffer.get_pixel(5, 0) == (0, 0, 255, 255)

    def test_eraser(self, stacked_engine):
        eraser = BrushState(tool="eraser", size=6)

        stacked_engine.draw_line((20, 15), (20, 15), eraser)

        assert stacked_engine.get_layer(1).buffer.get_pixel(20, 15) == (0, 0, 0, 0)
        assert stacked_engine.get_layer(1).buffer.get_pixel(0, 0) == (255, 0, 0, 255)

    def test_spray(self, ready_engine):
        spray = BrushState(tool="spray", size=5, opacity=1.0, color="#00FF00")

        landed = ready_engine.draw_spray((20, 15), spray, rng=random.Random(8))

        assert landed == 10
        assert not ready_engine.get_layer(1).buffer.is_transparent()


class TestSnapshots:
    """Tests for snapshot capture and restore."""

    def test_capture_and_restore(self, stacked_engine):
        snapshot = stacked_engine.capture_snapshot()
        stacked_engine.clear_all_layers()

        stacked_engine.restore_snapshot(snapshot)

        assert stacked_engine.get_layer(1).buffer.get_pixel(0, 0) == (255, 0, 0, 255)
        assert stacked_engine.get_layer(2).buffer.get_pixel(5, 5) == (0, 0, 255, 255)

    def test_restored_buffers_are_writable(self, stacked_engine):
        snapshot = stacked_engine.capture_snapshot()
        stacked_engine.restore_snapshot(snapshot)

        stacked_engine.draw_line((0, 0), (5, 0), BLUE_BRUSH)

        assert snapshot[1].get_pixel(0, 0) == (255, 0, 0, 255)


class TestComposite:
    """Tests for display compositing."""

    def test_upper_layer_on_top(self, stacked_engine):
        result = stacked_engine.composite()

        assert result.get_pixel(5, 5) == (0, 0, 255, 255)
        assert result.get_pixel(0, 0) == (255, 0, 0, 255)

    def test_hidden_layer_contributes_nothing(self, stacked_engine):
        stacked_engine.set_layer_visibility(2, False)

        result = stacked_engine.composite()

        assert result.get_pixel(5, 5) == (255, 0, 0, 255)

    def test_sketch_shows_through(self, ready_engine):
        result = ready_engine.composite()

        assert result.get_pixel(3, 3) == (200, 200, 200, 255)

    def test_hidden_sketch(self, ready_engine):
        ready_engine.set_layer_visibility(0, False)

        assert ready_engine.composite().is_transparent()

    def test_exclude_sketch(self, ready_engine):
        assert ready_engine.composite(include_sketch=False).is_transparent()

    def test_composite_requires_sketch(self):
        with pytest.raises(SessionStateError):
            PaintEngine().composite()
