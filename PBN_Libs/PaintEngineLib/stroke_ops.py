"""
Stroke primitives for the raster paint engine.

All primitives work in canvas pixel coordinates and modify the given
PixelBuffer in place. Geometry is rasterized into a coverage mask with
Pillow's ImageDraw (no antialiasing), then the pixel operation is applied
with numpy:

- paint: "source-over" compositing of the brush color at the stroke opacity
- erase: covered pixels become fully transparent

Functions:
    line_coverage: Boolean mask of a round-capped line
    spray_hits: Per-pixel dot counts of one spray application
    composite_color: Source-over blend of a color through an alpha map
    draw_line_stroke: Brush or eraser segment
    draw_spray_stroke: One spray application
"""

import math
import random
from typing import Optional, Sequence, Tuple

import numpy as np

from PBN_Libs.constants import SPRAY_DENSITY_FACTOR
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.pillow_compat import Image, ImageDraw

Point = Tuple[float, float]


def line_coverage(width: int, height: int, start: Point, end: Point, size: int) -> np.ndarray:
    """
    Rasterize a round-capped line segment.

    Args:
        width: Canvas width
        height: Canvas height
        start: Segment start (canvas space)
        end: Segment end (canvas space)
        size: Stroke width in pixels

    Returns:
        (height, width) boolean coverage mask
    """
    mask = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(mask)
    radius = size / 2.0

    if start != end:
        draw.line([tuple(start), tuple(end)], fill=255, width=int(size))

    for x, y in (start, end):
        draw.ellipse([x - radius, y - radius, x + radius, y + radius], fill=255)

    return np.asarray(mask) > 0


def spray_hits(
    width: int,
    height: int,
    center: Point,
    size: int,
    rng: random.Random,
    density: Optional[int] = None,
) -> np.ndarray:
    """
    Scatter single-pixel dots uniformly (in angle and radius) around center.

    Args:
        width: Canvas width
        height: Canvas height
        center: Spray center (canvas space)
        size: Brush size; dots land within this radius of the center
        rng: Random source
        density: Number of dots (default size * SPRAY_DENSITY_FACTOR)

    Returns:
        (height, width) int array counting dots per pixel
    """
    if density is None:
        density = int(size) * SPRAY_DENSITY_FACTOR

    hits = np.zeros((height, width), dtype=np.int32)
    cx, cy = center
    for _ in range(density):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        radius = rng.uniform(0.0, size)
        x = int(math.floor(cx + radius * math.cos(angle)))
        y = int(math.floor(cy + radius * math.sin(angle)))
        if 0 <= x < width and 0 <= y < height:
            hits[y, x] += 1
    return hits


def composite_color(buffer: PixelBuffer, rgb: Sequence[int], alpha: np.ndarray) -> None:
    """
    Blend a solid color over a buffer through a per-pixel alpha map.

    Uses non-premultiplied source-over:
        out_a   = src_a + dst_a * (1 - src_a)
        out_rgb = (src_rgb * src_a + dst_rgb * dst_a * (1 - src_a)) / out_a

    Pixels where alpha is 0 are left untouched.

    Args:
        buffer: Destination buffer (modified in place)
        rgb: Source color
        alpha: (height, width) float array in [0, 1]
    """
    touched = alpha > 0
    if not touched.any():
        return

    src_a = alpha[touched][:, None]
    dst = buffer.pixels[touched].astype(np.float64)
    dst_rgb = dst[:, :3]
    dst_a = dst[:, 3:4] / 255.0
    src_rgb = np.asarray(rgb[:3], dtype=np.float64)[None, :]

    out_a = src_a + dst_a * (1.0 - src_a)
    out_rgb = (src_rgb * src_a + dst_rgb * dst_a * (1.0 - src_a)) / out_a

    result = np.empty_like(dst)
    result[:, :3] = out_rgb
    result[:, 3:4] = out_a * 255.0
    buffer.pixels[touched] = np.clip(np.rint(result), 0, 255).astype(np.uint8)


def draw_line_stroke(
    buffer: PixelBuffer,
    start: Point,
    end: Point,
    rgb: Sequence[int],
    size: int,
    opacity: float,
    erase: bool = False,
) -> int:
    """
    Draw (or erase) a segment of a brush stroke.

    Brush and eraser share the geometry; the eraser clears covered pixels to
    transparent instead of painting.

    Returns:
        Number of covered pixels
    """
    coverage = line_coverage(buffer.width, buffer.height, start, end, size)

    if erase:
        buffer.pixels[coverage] = 0
    else:
        composite_color(buffer, rgb, coverage * float(opacity))

    return int(coverage.sum())


def draw_spray_stroke(
    buffer: PixelBuffer,
    center: Point,
    rgb: Sequence[int],
    size: int,
    opacity: float,
    rng: Optional[random.Random] = None,
    density: Optional[int] = None,
) -> int:
    """
    Apply one spray burst at center.

    Every dot is blended at the stroke opacity; k dots on the same pixel
    compound to an alpha of 1 - (1 - opacity)^k.

    Returns:
        Number of dots that landed inside the canvas
    """
    if rng is None:
        rng = random.Random()

    hits = spray_hits(buffer.width, buffer.height, center, size, rng, density)
    alpha = np.where(hits > 0, 1.0 - (1.0 - float(opacity)) ** hits, 0.0)
    composite_color(buffer, rgb, alpha)
    return int(hits.sum())
