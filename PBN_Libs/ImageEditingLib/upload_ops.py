"""
Upload pipeline for Paint By Neon.

Turns uploaded image bytes into the three inputs of a painting session:
the posterized color reference, the grayscale sketch and the palette.

    bytes -> decode -> blur prefilter -> quantize -> grayscale sketch

The blur prefilter and sketch derivation are plain callables so callers can
swap them out; the defaults use Pillow filters.

Functions:
    apply_gaussian_blur: Default prefilter
    create_grayscale_sketch: Default sketch derivation
    process_upload: Run the full pipeline
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from PBN_Libs.constants import (
    DEFAULT_COLOR_LEVELS,
    DEFAULT_COLOR_THRESHOLD,
    DEFAULT_PREFILTER_RADIUS,
    SUPPORTED_STANDARD_IMAGES,
    TIE_BREAK_CLOSEST,
)
from PBN_Libs.ImageEditingLib.color_quantizer import quantize_image
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.pixel_codec import decode_pixel_buffer
from PBN_Libs.pillow_compat import Image, ImageFilter, ImageOps

logger = logging.getLogger(__name__)

BufferFilter = Callable[[PixelBuffer], PixelBuffer]


@dataclass
class UploadResult:
    """Products of an upload.

    Attributes:
        original: Posterized color reference image
        sketch: Grayscale sketch used as the background layer
        palette: Frequency-ranked hex colors of the posterized image
    """
    original: PixelBuffer
    sketch: PixelBuffer
    palette: List[str]


def is_supported_image(file_path: Path) -> bool:
    return file_path.suffix.lower() in SUPPORTED_STANDARD_IMAGES


def apply_gaussian_blur(
    buffer: PixelBuffer,
    radius: float = DEFAULT_PREFILTER_RADIUS,
) -> PixelBuffer:
    """
    Apply Gaussian blur to an image.

    Args:
        buffer: Source PixelBuffer
        radius: Blur radius in pixels (0 returns an unblurred copy)

    Returns:
        Blurred PixelBuffer

    Raises:
        ValueError: If radius < 0 or > 100
    """
    if not (0 <= radius <= 100):
        raise ValueError(f"radius must be 0 <= r <= 100, got {radius}")

    if radius == 0:
        return buffer.copy()

    blurred = buffer.to_image().filter(ImageFilter.GaussianBlur(radius=radius))
    return PixelBuffer.from_image(blurred)


def create_grayscale_sketch(buffer: PixelBuffer) -> PixelBuffer:
    """Convert an image to grayscale, keeping its alpha channel."""
    image = buffer.to_image()
    gray = ImageOps.grayscale(image)
    alpha = image.getchannel("A")
    sketch = Image.merge("RGBA", (gray, gray, gray, alpha))
    return PixelBuffer.from_image(sketch)


def process_upload(
    data: bytes,
    levels: int = DEFAULT_COLOR_LEVELS,
    threshold: float = DEFAULT_COLOR_THRESHOLD,
    tie_break: str = TIE_BREAK_CLOSEST,
    prefilter: Optional[BufferFilter] = apply_gaussian_blur,
    sketch_builder: BufferFilter = create_grayscale_sketch,
) -> UploadResult:
    """
    Process uploaded image bytes.

    Args:
        data: Raw bytes of the uploaded image file
        levels: Quantization granularity per channel
        threshold: Bucket merge distance
        tie_break: Bucket matching rule
        prefilter: Optional callable applied before quantizing (None disables)
        sketch_builder: Callable deriving the sketch from the posterized image

    Returns:
        UploadResult

    Raises:
        DecodeError: If the bytes are not a decodable image
    """
    source = decode_pixel_buffer(data)
    logger.debug(f"Decoded upload {source.width}x{source.height}")

    filtered = prefilter(source) if prefilter is not None else source
    quantized = quantize_image(filtered, levels=levels, threshold=threshold, tie_break=tie_break)
    sketch = sketch_builder(quantized.image)

    logger.info(
        f"Processed upload {source.width}x{source.height} into "
        f"{len(quantized.palette)} colors"
    )
    return UploadResult(original=quantized.image, sketch=sketch, palette=quantized.palette)
