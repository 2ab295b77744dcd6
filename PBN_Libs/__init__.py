"""
PBN_Libs - Paint By Neon Library Modules

This package contains core functionality for the Paint By Neon project,
organized into specialized sub-packages:

- ImageEditingLib: Pixel buffers, codec, quantizer, highlighter, upload and export
- PaintEngineLib: Layered raster painting, brush and view state, undo/redo history
- ProjStoreLib: Project file persistence

The session module ties them together into one painting session.
"""

__version__ = "0.1.0"
