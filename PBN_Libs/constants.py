"""
Constants and configuration values for Paint By Neon.

This module centralizes all constant values, magic numbers, and
configuration settings used throughout the application.
"""

# Project file constants
PROJECT_EXTENSION = ".paintbyneon"
LEGACY_PROJECT_EXTENSION = ".paintoverart"
SUPPORTED_PROJECT_EXTENSIONS = {PROJECT_EXTENSION, LEGACY_PROJECT_EXTENSION}
PROJECT_FILE_PREFIX = "paint-over-art-"
CURRENT_VERSION = "2.0.0"
LEGACY_VERSION = "1.0.0"

# Export
DEFAULT_EXPORT_FILENAME = "my-painting.png"
DEFAULT_OUTPUT_FORMAT = "PNG"
DATA_URL_PREFIX = "data:image/png;base64,"

# Quantizer defaults
DEFAULT_COLOR_LEVELS = 6
DEFAULT_COLOR_THRESHOLD = 70.0
TIE_BREAK_CLOSEST = "closest"
TIE_BREAK_FIRST = "first"

# Highlight
DEFAULT_HIGHLIGHT_TOLERANCE = 30
HIGHLIGHT_COLOR = (57, 255, 20)  # #39FF14

# Layers
SKETCH_LAYER_ID = 0
DEFAULT_LAYER_ID = 1
DEFAULT_PAINT_LAYER_COUNT = 3
SKETCH_LAYER_NAME = "Sketch"
PAINT_LAYER_NAME_TEMPLATE = "Layer {layer_id}"

# Brush
TOOL_BRUSH = "brush"
TOOL_SPRAY = "spray"
TOOL_ERASER = "eraser"
TOOL_TYPES = (TOOL_BRUSH, TOOL_SPRAY, TOOL_ERASER)
MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 50
DEFAULT_BRUSH_SIZE = 10
DEFAULT_BRUSH_COLOR = "#000000"
DEFAULT_BRUSH_OPACITY = 0.3
SPRAY_DENSITY_FACTOR = 2

# View transform
MIN_SCALE = 0.1
MAX_SCALE = 5.0
ZOOM_STEP = 0.1
DEFAULT_SCALE = 1.0

# Upload pipeline
DEFAULT_PREFILTER_RADIUS = 1.0

# Project field names
FIELD_VERSION = "version"
FIELD_TIMESTAMP = "timestamp"
FIELD_PROJECT = "project"
FIELD_ORIGINAL_IMAGE = "originalImage"
FIELD_SKETCH_IMAGE = "sketchImage"
FIELD_DOMINANT_COLORS = "dominantColors"
FIELD_CANVAS = "canvas"
FIELD_PAINT_LAYER = "paintLayer"
FIELD_PAINT_LAYERS = "paintLayers"
FIELD_DIMENSIONS = "dimensions"
FIELD_WIDTH = "width"
FIELD_HEIGHT = "height"
FIELD_SETTINGS = "settings"
FIELD_LAYERS = "layers"
FIELD_ACTIVE_LAYER_ID = "activeLayerId"
FIELD_LAYERS_VISIBILITY = "layersVisibility"

# Settings field names
FIELD_BRUSH_SIZE = "brushSize"
FIELD_BRUSH_COLOR = "brushColor"
FIELD_BRUSH_OPACITY = "brushOpacity"
FIELD_SCALE = "scale"
FIELD_OFFSET_X = "offsetX"
FIELD_OFFSET_Y = "offsetY"
FIELD_IS_ERASER = "isEraser"
FIELD_IS_PAN_MODE = "isPanMode"
FIELD_IS_COLOR_HIGHLIGHT_ENABLED = "isColorHighlightEnabled"
FIELD_TOOL_TYPE = "toolType"

# Supported upload formats
SUPPORTED_STANDARD_IMAGES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".webp"}
