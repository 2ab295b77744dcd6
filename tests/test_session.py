"""
Tests for PaintSession.

Tests cover:
- Upload and canvas lifecycle
- Pointer handling: strokes, spray, pan mode and coordinate mapping
- Undo/redo and clearing
- Save/load round trips and failure handling
- Export
- Color highlight regeneration
"""

import json

import pytest

from PBN_Libs.constants import HIGHLIGHT_COLOR
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.pixel_codec import decode_pixel_buffer, pixel_buffer_to_data_url
from PBN_Libs.PaintEngineLib.paint_engine import EngineState
from PBN_Libs.PaintEngineLib.view_transform import ViewTransform
from PBN_Libs.session import PaintSession

TIMEOUT = 5


def stroke(session, start, end):
    session.pointer_down(*start)
    session.pointer_move(*end)
    return session.pointer_up()


def layer_pixel(session, layer_id, x, y):
    return session.engine.get_layer(layer_id).buffer.get_pixel(x, y)


class TestEmptySession:
    """Tests for a session before any upload."""

    def test_defaults(self, session):
        assert session.brush.size == 10
        assert session.brush.color == "#000000"
        assert session.brush.opacity == 0.3
        assert session.view == ViewTransform()
        assert not session.can_save
        assert not session.can_undo

    def test_save_fails(self, session):
        result = session.save_project()

        assert not result.success
        assert result.message.startswith("No project data to save")

    def test_export_fails(self, session):
        assert not session.export_image().success

    def test_pointer_ignored(self, session):
        assert not session.pointer_down(1, 1)
        assert not session.pointer_move(2, 2)
        assert not session.pointer_up()

    def test_undo_is_noop(self, session):
        assert not session.undo()
        assert not session.redo()

    def test_no_highlight_without_image(self, session):
        assert session.request_highlight() is None
        assert session.highlight_image() is None


class TestUpload:
    """Tests for upload_image."""

    def test_upload_prepares_canvas(self, loaded_session):
        assert loaded_session.palette == ("#FF0000", "#0000FF")
        assert loaded_session.engine.state is EngineState.READY
        assert loaded_session.engine.size == (16, 8)
        assert len(loaded_session.history) == 1
        assert loaded_session.can_save

    def test_upload_failure_leaves_state(self, session):
        result = session.upload_image(b"garbage")

        assert not result.success
        assert result.message.startswith("Failed to process image")
        assert session.original is None
        assert session.engine.state is EngineState.UNINITIALIZED

    def test_upload_resets_view_and_history(self, loaded_session, photo_png):
        loaded_session.zoom_in()
        loaded_session.set_brush(opacity=1.0)
        stroke(loaded_session, (0, 0), (5, 0))
        loaded_session.toggle_color_highlight()

        loaded_session.upload_image(photo_png)

        assert loaded_session.view.scale == 1.0
        assert len(loaded_session.history) == 1
        assert not loaded_session.is_color_highlight_enabled
        assert loaded_session.engine.get_layer(1).buffer.is_transparent()

    def test_same_sketch_not_reloaded(self, loaded_session):
        loaded_session.set_brush(opacity=1.0)
        stroke(loaded_session, (0, 0), (5, 0))

        assert not loaded_session.load_sketch(loaded_session.sketch)
        assert not loaded_session.engine.get_layer(1).buffer.is_transparent()

    def test_forced_sketch_reload(self, loaded_session):
        assert loaded_session.load_sketch(loaded_session.sketch, force=True)
        assert len(loaded_session.history) == 1


class TestStrokes:
    """Tests for pointer-driven painting."""

    def test_brush_stroke_undo_redo(self, loaded_session):
        loaded_session.set_brush(color="#0000FF", size=10, opacity=1.0)

        assert stroke(loaded_session, (0, 0), (10, 0))
        assert layer_pixel(loaded_session, 1, 5, 0) == (0, 0, 255, 255)
        assert loaded_session.can_undo

        assert loaded_session.undo()
        assert loaded_session.engine.get_layer(1).buffer.is_transparent()
        assert loaded_session.can_redo

        assert loaded_session.redo()
        assert layer_pixel(loaded_session, 1, 5, 0) == (0, 0, 255, 255)

    def test_one_snapshot_per_stroke(self, loaded_session):
        loaded_session.pointer_down(0, 0)
        for x in range(1, 6):
            loaded_session.pointer_move(x, 0)
        loaded_session.pointer_up()

        assert len(loaded_session.history) == 2

    def test_pointer_leave_ends_stroke(self, loaded_session):
        loaded_session.pointer_down(0, 0)
        loaded_session.pointer_move(3, 3)

        assert loaded_session.pointer_leave()
        assert not loaded_session.pointer_move(6, 6)
        assert len(loaded_session.history) == 2

    def test_pointer_up_without_stroke(self, loaded_session):
        assert not loaded_session.pointer_up()
        assert len(loaded_session.history) == 1

    def test_pointer_mapping_uses_view(self, loaded_session):
        loaded_session.set_brush(size=5, opacity=1.0, color="#00FF00")
        loaded_session.view = ViewTransform(scale=2.0, offset_x=4, offset_y=4)

        stroke(loaded_session, (8, 8), (8, 8))

        assert layer_pixel(loaded_session, 1, 2, 2) == (0, 255, 0, 255)
        assert layer_pixel(loaded_session, 1, 10, 7) == (0, 0, 0, 0)

    def test_spray_on_move(self, loaded_session):
        loaded_session.set_brush(tool="spray", size=3, opacity=1.0)

        stroke(loaded_session, (8, 4), (8, 4))

        assert not loaded_session.engine.get_layer(1).buffer.is_transparent()

    def test_strokes_go_to_active_layer(self, loaded_session):
        loaded_session.set_active_layer(2)
        loaded_session.set_brush(opacity=1.0)

        stroke(loaded_session, (0, 0), (4, 0))

        assert loaded_session.engine.get_layer(1).buffer.is_transparent()
        assert not loaded_session.engine.get_layer(2).buffer.is_transparent()

    def test_pan_mode(self, loaded_session):
        assert loaded_session.toggle_pan_mode()

        loaded_session.pointer_down(0, 0)
        loaded_session.pointer_move(5, 7)
        loaded_session.pointer_up()

        assert (loaded_session.view.offset_x, loaded_session.view.offset_y) == (5, 7)
        assert len(loaded_session.history) == 1
        assert loaded_session.engine.get_layer(1).buffer.is_transparent()

    def test_invalid_brush_change(self, loaded_session):
        with pytest.raises(ValueError):
            loaded_session.set_brush(size=99)
        assert loaded_session.brush.size == 10


class TestLayerSummaries:
    """Tests for the layer panel listing."""

    def test_sketch_first_then_paint_layers(self, session):
        summaries = session.layer_summaries()

        assert [s["layer_id"] for s in summaries] == [0, 1, 2, 3]
        assert summaries[0] == {
            "layer_id": 0,
            "name": "Sketch",
            "visible": True,
            "is_sketch": True,
            "active": False,
        }
        assert summaries[1]["name"] == "Layer 1"
        assert summaries[1]["active"]

    def test_reflects_active_layer_and_visibility(self, loaded_session):
        loaded_session.set_active_layer(3)
        loaded_session.set_layer_visibility(2, False)

        summaries = {s["layer_id"]: s for s in loaded_session.layer_summaries()}

        assert [k for k, s in summaries.items() if s["active"]] == [3]
        assert not summaries[2]["visible"]
        assert summaries[1]["visible"]


class TestClearing:
    """Tests for clear_layer and clear_all."""

    def test_clear_layer_is_undoable(self, loaded_session):
        loaded_session.set_brush(opacity=1.0)
        stroke(loaded_session, (0, 0), (5, 0))

        loaded_session.clear_layer()
        assert loaded_session.engine.get_layer(1).buffer.is_transparent()

        loaded_session.undo()
        assert not loaded_session.engine.get_layer(1).buffer.is_transparent()

    def test_clear_all_resets_history(self, loaded_session):
        stroke(loaded_session, (0, 0), (5, 0))

        loaded_session.clear_all()

        assert len(loaded_session.history) == 1
        assert not loaded_session.can_undo


class TestViewControls:
    """Tests for zoom and view reset."""

    def test_zoom(self, loaded_session):
        assert loaded_session.zoom_in() == 1.1
        assert loaded_session.zoom_out() == 1.0

        loaded_session.zoom_in()
        loaded_session.reset_view()
        assert loaded_session.view == ViewTransform()


class TestSaveLoad:
    """Tests for project save and load."""

    def paint_two_layers(self, session):
        session.set_brush(color="#0000FF", size=4, opacity=1.0)
        stroke(session, (0, 0), (6, 0))
        session.set_active_layer(2)
        session.set_brush(color="#00FF00", opacity=0.5)
        stroke(session, (10, 6), (14, 6))
        session.set_layer_visibility(2, False)

    def test_round_trip(self, loaded_session):
        self.paint_two_layers(loaded_session)
        saved = loaded_session.save_project()

        assert saved.success
        assert saved.message == f"Progress saved successfully as {saved.filename}"

        restored = PaintSession()
        try:
            result = restored.load_project(saved.data, filename=saved.filename)

            assert result.success
            assert result.message == "Project loaded successfully!"
            for layer_id in (1, 2, 3):
                assert (
                    restored.engine.get_layer(layer_id).buffer.to_bytes()
                    == loaded_session.engine.get_layer(layer_id).buffer.to_bytes()
                )
            assert restored.engine.layer_visibility() == {0: True, 1: True, 2: False, 3: True}
            assert restored.engine.active_layer_id == 2
            assert restored.brush == loaded_session.brush
            assert restored.palette == loaded_session.palette
            assert restored.original == loaded_session.original
            assert restored.engine.state is EngineState.READY
            assert len(restored.history) == 1
        finally:
            restored.close()

    def test_spray_tool_survives(self, loaded_session):
        loaded_session.set_brush(tool="spray")
        saved = loaded_session.save_project()

        loaded_session.set_brush(tool="brush")
        loaded_session.load_project(saved.data)

        assert loaded_session.brush.tool == "spray"

    def test_wrong_extension(self, loaded_session):
        data = loaded_session.save_project().data
        fresh = PaintSession()
        try:
            result = fresh.load_project(data, filename="painting.png")

            assert not result.success
            assert result.message.startswith("Failed to load project")
            assert fresh.original is None
        finally:
            fresh.close()

    def test_failed_load_leaves_state(self, loaded_session):
        loaded_session.set_brush(opacity=1.0)
        stroke(loaded_session, (0, 0), (5, 0))
        before = loaded_session.engine.layer_buffers()

        result = loaded_session.load_project(b'{"version": "2.0.0"}')

        assert not result.success
        assert loaded_session.engine.layer_buffers() == before
        assert len(loaded_session.history) == 2

    def test_invalid_settings_rejected(self, loaded_session):
        payload = json.loads(loaded_session.save_project().data)
        payload["settings"]["brushSize"] = 500

        result = loaded_session.load_project(json.dumps(payload).encode("utf-8"))

        assert not result.success
        assert loaded_session.brush.size == 10

    @pytest.mark.parametrize("field", ["brushSize", "brushOpacity", "scale", "offsetX", "offsetY"])
    def test_null_numeric_setting_rejected(self, loaded_session, field):
        payload = json.loads(loaded_session.save_project().data)
        payload["settings"][field] = None
        loaded_session.view.pan(3, 4)

        result = loaded_session.load_project(json.dumps(payload).encode("utf-8"))

        assert not result.success
        assert "Invalid settings data" in result.message
        assert loaded_session.brush.size == 10
        assert (loaded_session.view.offset_x, loaded_session.view.offset_y) == (3, 4)

    def test_unknown_layers_ignored(self, loaded_session):
        payload = json.loads(loaded_session.save_project().data)
        payload["canvas"]["paintLayers"]["7"] = pixel_buffer_to_data_url(
            PixelBuffer.filled(16, 8, (1, 2, 3, 255))
        )
        payload["layers"]["activeLayerId"] = 7

        result = loaded_session.load_project(json.dumps(payload).encode("utf-8"))

        assert result.success
        assert loaded_session.engine.layer_ids() == [1, 2, 3]
        assert loaded_session.engine.active_layer_id == 1

    def test_save_and_load_files(self, loaded_session, temp_project_dir):
        saved = loaded_session.save_project_to(temp_project_dir)

        assert saved.success
        path = temp_project_dir / saved.filename
        assert path.exists()
        assert loaded_session.load_project_file(path).success

    def test_load_missing_file(self, session, temp_project_dir):
        result = session.load_project_file(temp_project_dir / "gone.paintbyneon")

        assert not result.success


class TestExport:
    """Tests for export_image and export_to."""

    def test_export_sketch_background(self, loaded_session):
        result = loaded_session.export_image()

        assert result.success
        assert result.message == "Image exported successfully!"
        assert result.filename == "my-painting.png"
        assert decode_pixel_buffer(result.data) == loaded_session.sketch

    def test_export_with_original(self, loaded_session):
        result = loaded_session.export_image(include_original=True)

        assert decode_pixel_buffer(result.data) == loaded_session.original

    def test_hidden_layers_not_exported(self, loaded_session):
        loaded_session.set_brush(opacity=1.0)
        stroke(loaded_session, (0, 0), (5, 0))
        loaded_session.set_layer_visibility(1, False)

        result = loaded_session.export_image()

        assert decode_pixel_buffer(result.data) == loaded_session.sketch

    def test_export_to(self, loaded_session, temp_project_dir):
        result = loaded_session.export_to(temp_project_dir)

        assert result.success
        assert (temp_project_dir / "my-painting.png").read_bytes() == result.data

    def test_export_to_missing_directory(self, loaded_session, temp_project_dir):
        result = loaded_session.export_to(temp_project_dir / "missing")

        assert not result.success
        assert result.message == "An error occurred while exporting the image."


class TestColorHighlight:
    """Tests for the highlight overlay."""

    def test_disabled_shows_original(self, loaded_session):
        assert loaded_session.highlight_image() is loaded_session.original

    def test_highlight_matches_brush_color(self, loaded_session):
        loaded_session.set_brush(color="#FF0000")
        assert loaded_session.toggle_color_highlight()

        assert loaded_session.request_highlight().result(TIMEOUT) is True

        highlighted = loaded_session.highlight_image()
        assert highlighted.get_pixel(0, 0) == (*HIGHLIGHT_COLOR, 255)
        assert highlighted.get_pixel(12, 0) == (0, 0, 255, 255)

    def test_color_change_regenerates(self, loaded_session):
        loaded_session.set_brush(color="#FF0000")
        loaded_session.toggle_color_highlight()

        loaded_session.set_brush(color="#0000FF")
        loaded_session.request_highlight().result(TIMEOUT)

        highlighted = loaded_session.highlight_image()
        assert highlighted.get_pixel(0, 0) == (255, 0, 0, 255)
        assert highlighted.get_pixel(12, 0) == (*HIGHLIGHT_COLOR, 255)

    def test_matching_pixel_count(self, loaded_session):
        loaded_session.set_brush(color="#FF0000")

        assert loaded_session.matching_pixel_count() == 64

    def test_toggle_off(self, loaded_session):
        loaded_session.toggle_color_highlight()

        assert not loaded_session.toggle_color_highlight()
        assert loaded_session.highlight_image() is loaded_session.original
