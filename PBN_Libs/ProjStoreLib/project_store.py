"""
Project file storage for Paint By Neon.

This module handles the persistence layer for painting sessions, including
serializing, validating and restoring project files in the .paintbyneon
format (and the legacy single-layer .paintoverart format).

The project file is UTF-8 JSON:
- version, timestamp
- project: originalImage, sketchImage (PNG data URIs), dominantColors
- canvas: paintLayers {id: data URI} (or legacy paintLayer), dimensions
- settings: brush, view and toggle settings
- layers (optional): activeLayerId, layersVisibility {id: bool}

Functions:
    generate_save_filename: Timestamped project filename
    document_to_dict: ProjectDocument -> JSON-ready dict
    save_project: ProjectDocument -> UTF-8 JSON bytes
    validate_project_data: Structural validation of a parsed payload
    document_from_dict: Validated payload -> ProjectDocument
    load_project: UTF-8 JSON bytes -> ProjectDocument
    write_project_file: Save a document to a directory
    read_project_file: Load a document from a path
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PBN_Libs.constants import (
    CURRENT_VERSION,
    DEFAULT_LAYER_ID,
    FIELD_ACTIVE_LAYER_ID,
    FIELD_CANVAS,
    FIELD_DIMENSIONS,
    FIELD_DOMINANT_COLORS,
    FIELD_HEIGHT,
    FIELD_LAYERS,
    FIELD_LAYERS_VISIBILITY,
    FIELD_ORIGINAL_IMAGE,
    FIELD_PAINT_LAYER,
    FIELD_PAINT_LAYERS,
    FIELD_PROJECT,
    FIELD_SETTINGS,
    FIELD_SKETCH_IMAGE,
    FIELD_TIMESTAMP,
    FIELD_VERSION,
    FIELD_WIDTH,
    PROJECT_EXTENSION,
    PROJECT_FILE_PREFIX,
    SUPPORTED_PROJECT_EXTENSIONS,
)
from PBN_Libs.errors import (
    FormatError,
    ValidationError,
    VALIDATION_INVALID_FORMAT,
    VALIDATION_MISSING_CANVAS,
    VALIDATION_MISSING_IMAGES,
    VALIDATION_MISSING_SETTINGS,
    VALIDATION_MISSING_VERSION,
)
from PBN_Libs.ImageEditingLib.pixel_codec import (
    pixel_buffer_from_data_url,
    pixel_buffer_to_data_url,
)
from PBN_Libs.ProjStoreLib.project_models import ProjectDocument, ProjectSettings

logger = logging.getLogger(__name__)


def generate_save_filename(now: Optional[datetime] = None) -> str:
    """
    Generate a filename for a project save.

    Args:
        now: Timestamp to use (default: current UTC time)

    Returns:
        'paint-over-art-YYYY-MM-DDTHH-MM-SS.paintbyneon'
    """
    if now is None:
        now = datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{PROJECT_FILE_PREFIX}{timestamp}{PROJECT_EXTENSION}"


def document_to_dict(document: ProjectDocument) -> Dict[str, Any]:
    """Encode every image of a document and assemble the JSON payload."""
    width, height = document.dimensions
    paint_layers = {
        str(layer_id): pixel_buffer_to_data_url(document.layers[layer_id])
        for layer_id in sorted(document.layers)
    }

    return {
        FIELD_VERSION: document.version,
        FIELD_TIMESTAMP: document.timestamp,
        FIELD_PROJECT: {
            FIELD_ORIGINAL_IMAGE: pixel_buffer_to_data_url(document.original_image),
            FIELD_SKETCH_IMAGE: pixel_buffer_to_data_url(document.sketch_image),
            FIELD_DOMINANT_COLORS: list(document.palette),
        },
        FIELD_CANVAS: {
            FIELD_PAINT_LAYERS: paint_layers,
            FIELD_DIMENSIONS: {FIELD_WIDTH: width, FIELD_HEIGHT: height},
        },
        FIELD_SETTINGS: document.settings.to_dict(),
        FIELD_LAYERS: {
            FIELD_ACTIVE_LAYER_ID: document.active_layer_id,
            FIELD_LAYERS_VISIBILITY: {
                str(layer_id): bool(visible)
                for layer_id, visible in sorted(document.layer_visibility.items())
            },
        },
    }


def save_project(document: ProjectDocument) -> bytes:
    """
    Serialize a project document.

    Raises:
        ContextError: If an image cannot be encoded
    """
    payload = document_to_dict(document)
    return json.dumps(payload, indent=2).encode("utf-8")


def validate_project_data(payload: Any) -> None:
    """
    Validate the structure of a parsed project payload.

    A version other than CURRENT_VERSION is only logged; loading continues
    best-effort.

    Raises:
        ValidationError: With the kind of the first problem found
    """
    if not isinstance(payload, dict):
        raise ValidationError(VALIDATION_INVALID_FORMAT, "Invalid file format")

    version = payload.get(FIELD_VERSION)
    if not version or not isinstance(version, str):
        raise ValidationError(
            VALIDATION_MISSING_VERSION, "Missing or invalid version information"
        )

    project = payload.get(FIELD_PROJECT)
    if not isinstance(project, dict):
        raise ValidationError(VALIDATION_MISSING_IMAGES, "Missing project data")

    if not project.get(FIELD_ORIGINAL_IMAGE) or not project.get(FIELD_SKETCH_IMAGE):
        raise ValidationError(VALIDATION_MISSING_IMAGES, "Missing required image data")

    canvas = payload.get(FIELD_CANVAS)
    if not isinstance(canvas, dict):
        raise ValidationError(VALIDATION_MISSING_CANVAS, "Missing canvas data")

    paint_layers = canvas.get(FIELD_PAINT_LAYERS)
    if not paint_layers and not canvas.get(FIELD_PAINT_LAYER):
        raise ValidationError(VALIDATION_MISSING_CANVAS, "Missing paint layer data")

    if paint_layers and not isinstance(paint_layers, dict):
        raise ValidationError(VALIDATION_MISSING_CANVAS, "Invalid paint layer data")

    if not isinstance(payload.get(FIELD_SETTINGS), dict):
        raise ValidationError(VALIDATION_MISSING_SETTINGS, "Missing settings data")

    if version != CURRENT_VERSION:
        logger.warning(
            f"File version {version} may not be fully compatible with "
            f"current version {CURRENT_VERSION}"
        )


def _layer_id(key: Any) -> int:
    try:
        return int(key)
    except (TypeError, ValueError):
        raise ValidationError(
            VALIDATION_INVALID_FORMAT, f"Invalid layer id: {key!r}"
        ) from None


def document_from_dict(payload: Dict[str, Any]) -> ProjectDocument:
    """
    Build a ProjectDocument from a payload, decoding every image.

    Legacy files store one 'paintLayer'; it is loaded into DEFAULT_LAYER_ID.

    Raises:
        ValidationError: If the payload is structurally invalid
        DecodeError: If any embedded image cannot be decoded
    """
    validate_project_data(payload)

    project = payload[FIELD_PROJECT]
    canvas = payload[FIELD_CANVAS]

    original = pixel_buffer_from_data_url(project[FIELD_ORIGINAL_IMAGE])
    sketch = pixel_buffer_from_data_url(project[FIELD_SKETCH_IMAGE])

    paint_layers = canvas.get(FIELD_PAINT_LAYERS)
    if paint_layers:
        layers = {
            _layer_id(key): pixel_buffer_from_data_url(value)
            for key, value in paint_layers.items()
        }
    else:
        logger.debug("Loading legacy single-layer project")
        layers = {DEFAULT_LAYER_ID: pixel_buffer_from_data_url(canvas[FIELD_PAINT_LAYER])}

    for layer_id, buffer in layers.items():
        if buffer.size != sketch.size:
            raise ValidationError(
                VALIDATION_INVALID_FORMAT,
                f"Layer {layer_id} size {buffer.size} does not match sketch {sketch.size}",
            )

    layer_meta = payload.get(FIELD_LAYERS)
    if not isinstance(layer_meta, dict):
        layer_meta = {}

    visibility_data = layer_meta.get(FIELD_LAYERS_VISIBILITY)
    visibility = {}
    if isinstance(visibility_data, dict):
        visibility = {_layer_id(k): bool(v) for k, v in visibility_data.items()}

    active_layer_id = _layer_id(layer_meta.get(FIELD_ACTIVE_LAYER_ID, DEFAULT_LAYER_ID))

    colors = project.get(FIELD_DOMINANT_COLORS)
    palette = [str(color) for color in colors] if isinstance(colors, list) else []

    timestamp = payload.get(FIELD_TIMESTAMP)
    document = ProjectDocument(
        original_image=original,
        sketch_image=sketch,
        palette=palette,
        layers=layers,
        layer_visibility=visibility,
        active_layer_id=active_layer_id,
        settings=ProjectSettings.from_dict(payload[FIELD_SETTINGS]),
        version=payload[FIELD_VERSION],
    )
    if isinstance(timestamp, (int, float)):
        document.timestamp = int(timestamp)
    return document


def load_project(data: Union[bytes, str]) -> ProjectDocument:
    """
    Parse and validate a serialized project.

    Raises:
        ValidationError: If the text is not JSON or is structurally invalid
        DecodeError: If any embedded image cannot be decoded
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(VALIDATION_INVALID_FORMAT, f"Invalid file format: {e}") from e

    return document_from_dict(payload)


def is_project_file(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_PROJECT_EXTENSIONS


def write_project_file(
    output_dir: Path,
    document: ProjectDocument,
    filename: Optional[str] = None,
) -> Path:
    """
    Save a project document to a directory.

    Args:
        output_dir: Existing directory to write into
        document: Document to save
        filename: Filename to use (default: generate_save_filename())

    Returns:
        Path to the written file

    Raises:
        OSError: If the directory does not exist or the file cannot be written
    """
    if not output_dir.is_dir():
        raise OSError(f"Output directory does not exist: {output_dir}")

    project_path = output_dir / (filename or generate_save_filename())
    project_path.write_bytes(save_project(document))
    logger.info(f"Saved project to {project_path}")
    return project_path


def read_project_file(project_path: Path) -> ProjectDocument:
    """
    Load a project document from disk.

    Raises:
        FormatError: If the extension is not a project extension
        OSError: If the file cannot be read
        ValidationError, DecodeError: As for load_project
    """
    if not is_project_file(project_path):
        raise FormatError(
            f"Invalid file format. Expected {PROJECT_EXTENSION} file."
        )

    return load_project(project_path.read_bytes())
