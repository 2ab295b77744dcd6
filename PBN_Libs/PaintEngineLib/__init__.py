"""
PaintEngineLib - Layered raster painting

This module provides the paint engine, stroke primitives, brush and view
state, the undo/redo history and background task handling.
"""

from PBN_Libs.PaintEngineLib.brush_state import BrushState
from PBN_Libs.PaintEngineLib.view_transform import ViewTransform
from PBN_Libs.PaintEngineLib.layer_models import Layer
from PBN_Libs.PaintEngineLib.history_manager import HistoryManager, HistorySnapshot
from PBN_Libs.PaintEngineLib.paint_engine import EngineState, PaintEngine
from PBN_Libs.PaintEngineLib.async_tasks import LatestResultExecutor

__all__ = [
    "BrushState",
    "ViewTransform",
    "Layer",
    "HistoryManager",
    "HistorySnapshot",
    "EngineState",
    "PaintEngine",
    "LatestResultExecutor",
]
