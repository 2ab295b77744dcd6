"""
Export operations for Paint By Neon.

Flattens a painting into a single raster: a background (the posterized
original or the grayscale sketch) with every visible paint layer composited
on top in ascending layer id order.

Functions:
    flatten_layers: Alpha-composite layers onto a background
    export_painting: Flatten and encode as PNG
    save_export: Write an export to disk
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from PBN_Libs.constants import DEFAULT_EXPORT_FILENAME
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.pixel_codec import encode_pixel_buffer
from PBN_Libs.pillow_compat import Image

logger = logging.getLogger(__name__)


def _fit(image: Any, size) -> Any:
    if image.size != size:
        image = image.resize(size, Image.Resampling.LANCZOS)
    return image


def flatten_layers(
    background: Optional[PixelBuffer],
    layers: Iterable[PixelBuffer],
    size=None,
) -> PixelBuffer:
    """
    Composite layers onto a background.

    Args:
        background: Bottom image, or None for a transparent base
        layers: Buffers to composite, bottom to top
        size: (width, height) of the result; defaults to the background size

    Returns:
        Composited PixelBuffer

    Raises:
        ValueError: If neither background nor size is given
    """
    if size is None:
        if background is None:
            raise ValueError("flatten_layers requires a background or a size")
        size = background.size

    if background is not None:
        result = _fit(background.to_image(), size)
    else:
        result = Image.new("RGBA", size, (0, 0, 0, 0))

    for layer in layers:
        result = Image.alpha_composite(result, _fit(layer.to_image(), size))

    return PixelBuffer.from_image(result)


def export_painting(
    sketch: PixelBuffer,
    layers: Iterable[PixelBuffer],
    include_original: bool = False,
    original: Optional[PixelBuffer] = None,
) -> bytes:
    """
    Export a painting as PNG bytes.

    Args:
        sketch: Grayscale sketch; sets the export size
        layers: Visible paint layers in ascending id order
        include_original: Use the posterized original as background
        original: Posterized original (required when include_original is True)

    Returns:
        PNG bytes of the flattened painting
    """
    background = original if include_original and original is not None else sketch
    flattened = flatten_layers(background, layers, size=sketch.size)
    return encode_pixel_buffer(flattened)


def save_export(data: bytes, output_dir: Path, filename: str = DEFAULT_EXPORT_FILENAME) -> Path:
    """
    Write exported PNG bytes to disk.

    Raises:
        OSError: If directory cannot be accessed or file cannot be written
    """
    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    output_path = output_dir / filename
    output_path.write_bytes(data)
    logger.info(f"Exported painting to {output_path}")
    return output_path
