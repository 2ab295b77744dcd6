"""
Painting session for Paint By Neon.

PaintSession owns all state of one user session: the paint engine and its
history, brush and view settings, feature toggles, the uploaded images and
palette, and the highlight overlay. UI code drives it through plain method
calls and renders what it returns.

Boundary operations (upload, save, load, export) never raise for expected
failures; they return an OperationResult whose message is meant to be shown
to the user. A failed operation leaves the session untouched.

Classes:
    OperationResult: Outcome of a boundary operation
    PaintSession: Session state and operations
"""

import concurrent.futures
import dataclasses
import functools
import hashlib
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from PBN_Libs.config import PaintSessionConfig
from PBN_Libs.constants import (
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_LAYER_ID,
    SKETCH_LAYER_ID,
    TOOL_ERASER,
)
from PBN_Libs.errors import FormatError, PBNError
from PBN_Libs.ImageEditingLib.color_matcher import (
    count_matching_pixels,
    create_color_highlight,
)
from PBN_Libs.ImageEditingLib.export_ops import export_painting, save_export
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.upload_ops import apply_gaussian_blur, process_upload
from PBN_Libs.PaintEngineLib.async_tasks import LatestResultExecutor
from PBN_Libs.PaintEngineLib.brush_state import BrushState
from PBN_Libs.PaintEngineLib.history_manager import HistoryManager
from PBN_Libs.PaintEngineLib.paint_engine import PaintEngine
from PBN_Libs.PaintEngineLib.stroke_ops import Point
from PBN_Libs.PaintEngineLib.view_transform import ViewTransform
from PBN_Libs.ProjStoreLib.project_models import ProjectDocument, ProjectSettings
from PBN_Libs.ProjStoreLib.project_store import (
    generate_save_filename,
    is_project_file,
    load_project,
    save_project,
)

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of a boundary operation.

    Attributes:
        success: Whether the operation completed
        message: User-facing message describing the outcome
        filename: Suggested or written filename, when relevant
        data: Produced bytes (project file or PNG), when relevant
    """
    success: bool
    message: str
    filename: Optional[str] = None
    data: Optional[bytes] = None


def _fingerprint(buffer: PixelBuffer) -> str:
    digest = hashlib.sha1(buffer.to_bytes())
    digest.update(f"{buffer.width}x{buffer.height}".encode("ascii"))
    return digest.hexdigest()


class PaintSession:
    """
    All state of one painting session.

    Example:
        >>> session = PaintSession()
        >>> result = session.upload_image(Path("photo.jpg").read_bytes())
        >>> session.pointer_down(12, 30)
        >>> session.pointer_move(40, 30)
        >>> session.pointer_up()
        >>> session.undo()
        >>> saved = session.save_project()
    """

    def __init__(
        self,
        config: Optional[PaintSessionConfig] = None,
        rng: Optional[random.Random] = None,
        executor: Optional[LatestResultExecutor] = None,
    ):
        self.config = config or PaintSessionConfig()
        self.engine = PaintEngine(layer_count=self.config.paint_layer_count)
        self.history = HistoryManager(max_entries=self.config.max_history)
        self.brush = BrushState()
        self.view = ViewTransform()
        self.is_pan_mode = False
        self.is_color_highlight_enabled = False
        self.original: Optional[PixelBuffer] = None
        self.palette: Tuple[str, ...] = ()
        self.rng = rng or random.Random()

        self._executor = executor or LatestResultExecutor()
        self._highlight: Optional[PixelBuffer] = None
        self._sketch_fingerprint: Optional[str] = None

        self._is_drawing = False
        self._last_point: Optional[Point] = None
        self._is_panning = False
        self._last_pan_point: Optional[Point] = None

    def close(self) -> None:
        self._executor.shutdown()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def sketch(self) -> Optional[PixelBuffer]:
        return self.engine.sketch

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def can_save(self) -> bool:
        return self.original is not None and self.engine.is_ready

    # ------------------------------------------------------------------
    # Canvas lifecycle
    # ------------------------------------------------------------------

    def load_sketch(self, sketch: PixelBuffer, force: bool = False) -> bool:
        """
        Start a blank canvas on a sketch and commit the initial snapshot.

        Re-loading the sketch that is already on a ready canvas is a no-op
        unless force is set.

        Returns:
            True if the canvas was (re)initialized
        """
        fingerprint = _fingerprint(sketch)
        if not force and self.engine.is_ready and fingerprint == self._sketch_fingerprint:
            logger.debug("Sketch already loaded, skipping initialization")
            return False

        self.engine.load_sketch(sketch)
        self.engine.mark_ready()
        self.history.reset(self.engine.capture_snapshot())
        self._sketch_fingerprint = fingerprint
        self._reset_pointer()
        return True

    def _restore_canvas(self, sketch: PixelBuffer, layers: Dict[int, PixelBuffer]) -> None:
        self.engine.load_sketch(sketch)
        self.engine.restore_layers(layers)
        self.engine.mark_ready()
        self.history.reset(self.engine.capture_snapshot())
        self._sketch_fingerprint = _fingerprint(sketch)
        self._reset_pointer()

    def _reset_pointer(self) -> None:
        self._is_drawing = False
        self._last_point = None
        self._is_panning = False
        self._last_pan_point = None

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload_image(self, data: bytes) -> OperationResult:
        """
        Process an uploaded photo and start a new session on it.

        Resets view, history, highlight toggle and layers. An undecodable
        file leaves the session untouched.
        """
        radius = self.config.prefilter_radius
        prefilter = (lambda buffer: apply_gaussian_blur(buffer, radius)) if radius > 0 else None

        try:
            upload = process_upload(
                data,
                levels=self.config.color_levels,
                threshold=self.config.color_threshold,
                tie_break=self.config.tie_break,
                prefilter=prefilter,
            )
        except PBNError as e:
            logger.error(f"Failed to process image: {e}")
            return OperationResult(False, f"Failed to process image: {e}")

        self.original = upload.original
        self.palette = tuple(upload.palette)
        self.view.reset()
        self.is_color_highlight_enabled = False
        self._highlight = None
        self.load_sketch(upload.sketch, force=True)

        return OperationResult(True, f"Image processed into {len(self.palette)} colors")

    # ------------------------------------------------------------------
    # Brush, view and toggles
    # ------------------------------------------------------------------

    def set_brush(self, **changes: Any) -> BrushState:
        """
        Update brush fields (tool, size, color, opacity).

        Raises:
            ValueError: If a value is out of range; the brush is unchanged
        """
        previous_color = self.brush.color
        self.brush = dataclasses.replace(self.brush, **changes)
        if self.brush.color != previous_color and self.is_color_highlight_enabled:
            self.request_highlight()
        return self.brush

    def zoom_in(self) -> float:
        return self.view.zoom_in()

    def zoom_out(self) -> float:
        return self.view.zoom_out()

    def reset_view(self) -> None:
        self.view.reset()

    def toggle_pan_mode(self) -> bool:
        self.is_pan_mode = not self.is_pan_mode
        self._reset_pointer()
        return self.is_pan_mode

    # ------------------------------------------------------------------
    # Highlight overlay
    # ------------------------------------------------------------------

    def toggle_color_highlight(self) -> bool:
        self.is_color_highlight_enabled = not self.is_color_highlight_enabled
        if self.is_color_highlight_enabled:
            self.request_highlight()
        return self.is_color_highlight_enabled

    def request_highlight(self) -> Optional[concurrent.futures.Future]:
        """
        Regenerate the highlight overlay for the current brush color in the
        background.

        Returns:
            The delivery future, or None if no image is loaded
        """
        if self.original is None:
            return None

        return self._executor.submit(
            create_color_highlight,
            self.original,
            self.brush.color,
            self.config.highlight_tolerance,
            on_result=functools.partial(self._set_highlight, self.original),
        )

    def _set_highlight(self, source: PixelBuffer, highlight: PixelBuffer) -> None:
        # Results computed for a replaced image are discarded
        if source is self.original:
            self._highlight = highlight

    def matching_pixel_count(self) -> int:
        """Pixels of the original that match the brush color (status text)."""
        if self.original is None:
            return 0
        return count_matching_pixels(
            self.original, self.brush.color, self.config.highlight_tolerance
        )

    def highlight_image(self) -> Optional[PixelBuffer]:
        """The highlighted image when enabled and available, else the original."""
        if self.is_color_highlight_enabled and self._highlight is not None:
            return self._highlight
        return self.original

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def set_active_layer(self, layer_id: int) -> None:
        self.engine.set_active_layer(layer_id)

    def set_layer_visibility(self, layer_id: int, visible: bool) -> None:
        self.engine.set_layer_visibility(layer_id, visible)

    def layer_summaries(self) -> List[Dict[str, Any]]:
        """Layer panel rows, sketch first, each flagged with whether it is active."""
        layers = [self.engine.get_layer(SKETCH_LAYER_ID)] + self.engine.paint_layers()
        summaries = []
        for layer in layers:
            summary = layer.to_dict()
            summary["active"] = layer.layer_id == self.engine.active_layer_id
            summaries.append(summary)
        return summaries

    def clear_layer(self, layer_id: Optional[int] = None) -> None:
        """Clear one layer (the active one by default) as an undoable step."""
        self.engine.clear_layer(self.engine.active_layer_id if layer_id is None else layer_id)
        self.history.push(self.engine.capture_snapshot())

    def clear_all(self) -> None:
        """Clear every layer and start a fresh one-entry history."""
        self.engine.clear_all_layers()
        self.history.reset(self.engine.capture_snapshot())

    def composite(self) -> PixelBuffer:
        return self.engine.composite()

    # ------------------------------------------------------------------
    # Pointer input (container-relative coordinates)
    # ------------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> bool:
        if not self.engine.is_ready:
            return False

        if self.is_pan_mode:
            self._is_panning = True
            self._last_pan_point = (x, y)
            return True

        self._is_drawing = True
        self._last_point = self.view.screen_to_canvas(x, y)
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        if self.is_pan_mode and self._is_panning and self._last_pan_point is not None:
            last_x, last_y = self._last_pan_point
            self.view.pan(x - last_x, y - last_y)
            self._last_pan_point = (x, y)
            return True

        if not self._is_drawing or self._last_point is None:
            return False

        point = self.view.screen_to_canvas(x, y)
        if self.brush.is_spray:
            self.engine.draw_spray(point, self.brush, rng=self.rng)
        else:
            self.engine.draw_line(self._last_point, point, self.brush)
        self._last_point = point
        return True

    def pointer_up(self) -> bool:
        """End a pan or a stroke; a finished stroke commits one snapshot."""
        if self._is_panning:
            self._is_panning = False
            self._last_pan_point = None
            return False

        if not self._is_drawing:
            return False

        self._is_drawing = False
        self._last_point = None
        self.history.push(self.engine.capture_snapshot())
        return True

    pointer_leave = pointer_up

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.engine.restore_snapshot(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.engine.restore_snapshot(snapshot)
        return True

    # ------------------------------------------------------------------
    # Save / load
    # ------------------------------------------------------------------

    def settings(self) -> ProjectSettings:
        return ProjectSettings(
            brush_size=self.brush.size,
            brush_color=self.brush.color,
            brush_opacity=self.brush.opacity,
            scale=self.view.scale,
            offset_x=self.view.offset_x,
            offset_y=self.view.offset_y,
            is_eraser=self.brush.tool == TOOL_ERASER,
            is_pan_mode=self.is_pan_mode,
            is_color_highlight_enabled=self.is_color_highlight_enabled,
            tool_type=self.brush.tool,
        )

    def build_document(self) -> ProjectDocument:
        return ProjectDocument(
            original_image=self.original.copy(),
            sketch_image=self.engine.sketch.copy(),
            palette=list(self.palette),
            layers=self.engine.layer_buffers(),
            layer_visibility=self.engine.layer_visibility(),
            active_layer_id=self.engine.active_layer_id,
            settings=self.settings(),
        )

    def save_project(self) -> OperationResult:
        """Serialize the session; the bytes are in the result's data."""
        if not self.can_save:
            return OperationResult(
                False,
                "No project data to save. Please upload an image and start painting first.",
            )

        try:
            data = save_project(self.build_document())
        except PBNError as e:
            logger.error(f"Error saving project: {e}")
            return OperationResult(False, f"Failed to save progress: {e}")

        filename = generate_save_filename()
        logger.info(f"Serialized project {filename}")
        return OperationResult(
            True, f"Progress saved successfully as {filename}", filename=filename, data=data
        )

    def save_project_to(self, output_dir: Path) -> OperationResult:
        result = self.save_project()
        if not result.success:
            return result

        try:
            if not output_dir.is_dir():
                raise OSError(f"Output directory does not exist: {output_dir}")
            (output_dir / result.filename).write_bytes(result.data)
        except OSError as e:
            logger.error(f"Error saving project: {e}")
            return OperationResult(False, f"Failed to save progress: {e}")

        return result

    def load_project(self, data: bytes, filename: Optional[str] = None) -> OperationResult:
        """
        Restore a session from project bytes.

        The document is fully parsed, decoded and checked before any session
        state changes.
        """
        try:
            if filename is not None and not is_project_file(Path(filename)):
                raise FormatError("Invalid file format. Expected .paintbyneon file.")
            document = load_project(data)
            self._check_document(document)
            brush = BrushState(
                tool=document.settings.tool,
                size=document.settings.brush_size,
                color=document.settings.brush_color,
                opacity=document.settings.brush_opacity,
            )
            view = ViewTransform(
                scale=document.settings.scale,
                offset_x=document.settings.offset_x,
                offset_y=document.settings.offset_y,
            )
        except (PBNError, ValueError) as e:
            logger.error(f"Error loading project: {e}")
            return OperationResult(False, f"Failed to load project: {e}")

        self._apply_document(document, brush, view)
        logger.info(f"Loaded project version {document.version}")
        return OperationResult(True, "Project loaded successfully!", filename=filename)

    def load_project_file(self, project_path: Path) -> OperationResult:
        try:
            data = project_path.read_bytes()
        except OSError as e:
            logger.error(f"Error loading project: {e}")
            return OperationResult(False, f"Failed to load project: {e}")
        return self.load_project(data, filename=project_path.name)

    def _check_document(self, document: ProjectDocument) -> None:
        known = set(self.engine.layer_ids())
        unknown = sorted(set(document.layers) - known)
        if unknown:
            logger.warning(f"Ignoring unknown layer ids in project: {unknown}")

    def _apply_document(
        self,
        document: ProjectDocument,
        brush: BrushState,
        view: ViewTransform,
    ) -> None:
        known = set(self.engine.layer_ids())
        layers = {k: v for k, v in document.layers.items() if k in known}

        self.original = document.original_image
        self.palette = tuple(document.palette)
        self.brush = brush
        self.view = view
        self.is_pan_mode = document.settings.is_pan_mode
        self.is_color_highlight_enabled = document.settings.is_color_highlight_enabled
        self._highlight = None

        self._restore_canvas(document.sketch_image, layers)

        for layer_id in [SKETCH_LAYER_ID] + sorted(known):
            self.engine.set_layer_visibility(
                layer_id, document.layer_visibility.get(layer_id, True)
            )

        active = document.active_layer_id
        self.engine.set_active_layer(active if active in known else DEFAULT_LAYER_ID)

        if self.is_color_highlight_enabled:
            self.request_highlight()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_image(self, include_original: bool = False) -> OperationResult:
        """
        Flatten the painting into a PNG.

        Args:
            include_original: Use the posterized original as background
                              instead of the grayscale sketch
        """
        if not self.engine.is_ready:
            return OperationResult(
                False,
                "No canvas data to export. Please upload an image and start painting first.",
            )

        try:
            data = export_painting(
                self.engine.sketch,
                self.engine.visible_layer_buffers(),
                include_original=include_original,
                original=self.original,
            )
        except PBNError as e:
            logger.error(f"Export failed: {e}")
            return OperationResult(False, "An error occurred while exporting the image.")

        return OperationResult(
            True, "Image exported successfully!", filename=DEFAULT_EXPORT_FILENAME, data=data
        )

    def export_to(self, output_dir: Path, include_original: bool = False) -> OperationResult:
        result = self.export_image(include_original)
        if not result.success:
            return result

        try:
            save_export(result.data, output_dir, result.filename)
        except OSError as e:
            logger.error(f"Export failed: {e}")
            return OperationResult(False, "An error occurred while exporting the image.")

        return result
