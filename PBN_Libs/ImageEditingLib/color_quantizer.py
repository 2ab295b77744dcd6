"""
Color quantizer for Paint By Neon.

Reduces an RGBA image to a small set of representative "bucket" colors and
extracts a frequency-ranked palette from the result.

The first pass snaps every opaque pixel to a per-channel quantized color,
then merges that color into the closest already-seen bucket when it lies
within the Euclidean threshold. The second pass counts the colors of the
posterized image.

Example:
    >>> buffer = PixelBuffer.filled(4, 4, (255, 0, 0, 255))
    >>> result = quantize_image(buffer, levels=6, threshold=70)
    >>> result.palette
    ['#FF0000']

Functions:
    quantize_channel: Quantize a single channel value
    quantize_color: Quantize an RGB triplet
    color_distance: Euclidean RGB distance
    quantize_image: Posterize a buffer and extract its palette
    extract_palette: Frequency-ranked palette of a buffer
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from PBN_Libs.constants import (
    DEFAULT_COLOR_LEVELS,
    DEFAULT_COLOR_THRESHOLD,
    TIE_BREAK_CLOSEST,
    TIE_BREAK_FIRST,
)
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer, RgbColor, rgb_to_hex


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def quantize_channel(value: int, levels: int) -> int:
    """
    Quantize one channel to the nearest multiple of 256/levels.

    The result is not clamped and can be 256 for bright channels; callers
    clamp when writing pixels.
    """
    step = 256 / levels
    return _round_half_up(_round_half_up(value / step) * step)


def quantize_color(color: Sequence[int], levels: int) -> RgbColor:
    return (
        quantize_channel(color[0], levels),
        quantize_channel(color[1], levels),
        quantize_channel(color[2], levels),
    )


def color_distance(a: Sequence[float], b: Sequence[float]) -> float:
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return math.sqrt(dr * dr + dg * dg + db * db)


@dataclass
class QuantizeResult:
    """Output of quantize_image.

    Attributes:
        image: Posterized PixelBuffer (a new buffer)
        palette: Hex colors ranked by pixel count, most frequent first
        buckets: Bucket colors in discovery order (unclamped)
    """
    image: PixelBuffer
    palette: List[str]
    buckets: List[RgbColor]


class _BucketMatcher:
    """Matches quantized colors against a growing bucket list.

    Results are cached per quantized color together with the number of
    buckets scanned so far. Buckets are only ever appended, so resuming the
    scan over the new buckets gives the same answer as a full rescan.
    """

    def __init__(self, threshold: float, tie_break: str):
        self.threshold = threshold
        self.tie_break = tie_break
        self.buckets: List[RgbColor] = []
        # quantized color -> (best distance, bucket index or -1, buckets scanned)
        self._cache: Dict[RgbColor, Tuple[float, int, int]] = {}

    def match(self, quantized: RgbColor) -> RgbColor:
        best_distance, best_index, scanned = self._cache.get(
            quantized, (self.threshold, -1, 0)
        )

        if not (self.tie_break == TIE_BREAK_FIRST and best_index >= 0):
            for index in range(scanned, len(self.buckets)):
                distance = color_distance(quantized, self.buckets[index])
                if distance < best_distance:
                    best_distance = distance
                    best_index = index
                    if self.tie_break == TIE_BREAK_FIRST:
                        break

        if best_index < 0:
            self.buckets.append(quantized)
            best_distance = 0.0
            best_index = len(self.buckets) - 1

        self._cache[quantized] = (best_distance, best_index, len(self.buckets))
        return self.buckets[best_index]


def quantize_image(
    buffer: PixelBuffer,
    levels: int = DEFAULT_COLOR_LEVELS,
    threshold: float = DEFAULT_COLOR_THRESHOLD,
    tie_break: str = TIE_BREAK_CLOSEST,
) -> QuantizeResult:
    """
    Posterize an image and extract its dominant colors.

    Args:
        buffer: Source PixelBuffer (not modified)
        levels: Quantization granularity per channel (>= 1)
        threshold: Maximum Euclidean distance for merging into a bucket (>= 0)
        tie_break: 'closest' snaps to the nearest bucket under threshold,
                   'first' to the first bucket under threshold in discovery order

    Returns:
        QuantizeResult with the posterized image, palette and buckets

    Raises:
        ValueError: If levels, threshold or tie_break are invalid
    """
    if levels < 1:
        raise ValueError(f"levels must be >= 1, got {levels}")

    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")

    if tie_break not in (TIE_BREAK_CLOSEST, TIE_BREAK_FIRST):
        raise ValueError(f"Unsupported tie_break: {tie_break}")

    output = buffer.copy()
    flat = output.pixels.reshape(-1, 4)
    matcher = _BucketMatcher(float(threshold), tie_break)

    opaque_indices = np.flatnonzero(flat[:, 3] != 0)
    source_rgb = flat[opaque_indices, :3].tolist()

    snapped = np.empty((len(source_rgb), 3), dtype=np.int64)
    quantized_cache: Dict[Tuple[int, int, int], RgbColor] = {}
    for row, rgb in enumerate(source_rgb):
        key = (rgb[0], rgb[1], rgb[2])
        quantized = quantized_cache.get(key)
        if quantized is None:
            quantized = quantize_color(key, levels)
            quantized_cache[key] = quantized
        snapped[row] = matcher.match(quantized)

    if len(source_rgb):
        flat[opaque_indices, :3] = np.clip(snapped, 0, 255).astype(np.uint8)

    return QuantizeResult(
        image=output,
        palette=extract_palette(output),
        buckets=list(matcher.buckets),
    )


def extract_palette(buffer: PixelBuffer) -> List[str]:
    """
    Rank the distinct colors of a buffer by frequency.

    Transparent pixels are skipped. Ties keep first-encounter order.

    Returns:
        Uppercase '#RRGGBB' strings, most frequent first
    """
    flat = buffer.pixels.reshape(-1, 4)
    opaque = flat[flat[:, 3] != 0, :3]
    if len(opaque) == 0:
        return []

    colors, first_index, counts = np.unique(
        opaque, axis=0, return_index=True, return_counts=True
    )
    # Primary key: count descending; secondary: first encounter ascending
    order = np.lexsort((first_index, -counts))
    return [rgb_to_hex(colors[i].tolist()) for i in order]
