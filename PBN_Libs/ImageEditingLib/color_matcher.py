"""
Color matching and highlight overlay for Paint By Neon.

A pixel "matches" a target color when each RGB channel differs by at most the
tolerance. This is a per-channel bound, unlike the quantizer's Euclidean
distance.

Functions:
    colors_match: Tolerance test between two colors
    matching_mask: Boolean mask of matching pixels
    count_matching_pixels: Number of matching pixels
    create_color_highlight: Copy of an image with matching pixels marked
"""

from typing import Sequence

import numpy as np

from PBN_Libs.constants import DEFAULT_HIGHLIGHT_TOLERANCE, HIGHLIGHT_COLOR
from PBN_Libs.ImageEditingLib.image_models import ColorLike, PixelBuffer, to_rgb


def colors_match(
    color1: ColorLike,
    color2: ColorLike,
    tolerance: float = DEFAULT_HIGHLIGHT_TOLERANCE,
) -> bool:
    """
    Check if two colors match within a given tolerance.

    Args:
        color1: Hex string or RGB(A) tuple
        color2: Hex string or RGB(A) tuple
        tolerance: Maximum allowed difference per channel

    Returns:
        True if |R1-R2|, |G1-G2| and |B1-B2| are all <= tolerance
    """
    r1, g1, b1 = to_rgb(color1)
    r2, g2, b2 = to_rgb(color2)
    return (
        abs(r1 - r2) <= tolerance
        and abs(g1 - g2) <= tolerance
        and abs(b1 - b2) <= tolerance
    )


def matching_mask(
    buffer: PixelBuffer,
    target_color: ColorLike,
    tolerance: float = DEFAULT_HIGHLIGHT_TOLERANCE,
) -> np.ndarray:
    """Return a (height, width) boolean mask of pixels matching target_color."""
    target = np.array(to_rgb(target_color), dtype=np.int16)
    diff = np.abs(buffer.pixels[:, :, :3].astype(np.int16) - target)
    return np.all(diff <= tolerance, axis=2)


def count_matching_pixels(
    buffer: PixelBuffer,
    target_color: ColorLike,
    tolerance: float = DEFAULT_HIGHLIGHT_TOLERANCE,
) -> int:
    return int(matching_mask(buffer, target_color, tolerance).sum())


def create_color_highlight(
    buffer: PixelBuffer,
    target_color: ColorLike,
    tolerance: float = DEFAULT_HIGHLIGHT_TOLERANCE,
    marker_color: Sequence[int] = HIGHLIGHT_COLOR,
) -> PixelBuffer:
    """
    Create a highlighted version of an image.

    Pixels matching the target color get the marker color (neon green by
    default) with their alpha kept. All other pixels are byte-identical to
    the source. The input buffer is not modified.

    Args:
        buffer: Source image
        target_color: Color to highlight
        tolerance: Per-channel tolerance
        marker_color: RGB color written into matching pixels

    Returns:
        A new PixelBuffer
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")

    highlighted = buffer.copy()
    mask = matching_mask(buffer, target_color, tolerance)
    highlighted.pixels[mask, :3] = to_rgb(marker_color)
    return highlighted
