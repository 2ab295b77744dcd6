"""
Image data models for Paint By Neon.

This module defines the raster and color types shared by the codec,
quantizer, highlighter and paint engine.

Classes:
    PixelBuffer: Fixed-size RGBA raster backed by a numpy uint8 array

Functions:
    hex_to_rgb: Parse a '#RRGGBB' string
    rgb_to_hex: Format an RGB triplet as '#RRGGBB'
    to_rgb: Normalize a hex string or RGB(A) tuple to an RGB triplet

Type Aliases:
    RgbColor: A tuple of 3 integers (0-255)
    RgbaColor: A tuple of 4 integers (0-255)
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from PBN_Libs.pillow_compat import Image, ImageClass

RgbColor = Tuple[int, int, int]
RgbaColor = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int]]


def hex_to_rgb(value: str) -> RgbColor:
    """
    Parse a hex color string.

    Args:
        value: Color in '#RRGGBB' form (leading '#' optional)

    Returns:
        (r, g, b) tuple

    Raises:
        ValueError: If the string is not a 6-digit hex color
    """
    text = str(value).strip().lstrip("#")
    if len(text) != 6:
        raise ValueError(f"Expected '#RRGGBB' color, got {value!r}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError:
        raise ValueError(f"Expected '#RRGGBB' color, got {value!r}") from None


def rgb_to_hex(color: Sequence[int]) -> str:
    """Format the first three channels of a color as uppercase '#RRGGBB'."""
    r, g, b = (int(round(channel)) for channel in color[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def to_rgb(color: ColorLike) -> RgbColor:
    """Normalize a hex string or RGB/RGBA sequence to an RGB triplet."""
    if isinstance(color, str):
        return hex_to_rgb(color)
    if len(color) < 3:
        raise ValueError(f"Expected at least 3 channels, got {color!r}")
    return int(color[0]), int(color[1]), int(color[2])


@dataclass(eq=False)
class PixelBuffer:
    """An RGBA raster.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        pixels: numpy uint8 array of shape (height, width, 4), row-major RGBA

    Each PixelBuffer owns its array; use copy() to hand a buffer to another
    owner.
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        """Validate dimensions against the pixel array."""
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")

        if self.pixels.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, got {self.pixels.dtype}")

        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected:
            raise ValueError(
                f"pixels shape {self.pixels.shape} does not match {expected}"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    __hash__ = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Create a fully transparent buffer."""
        return cls(width, height, np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, color: Sequence[int]) -> "PixelBuffer":
        """Create a buffer filled with one RGBA (or opaque RGB) color."""
        rgba = tuple(color) if len(color) == 4 else (*to_rgb(color), 255)
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(width, height, pixels)

    @classmethod
    def from_image(cls, image: ImageClass) -> "PixelBuffer":
        """Create a buffer from a PIL Image (converted to RGBA)."""
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        rgba = image.convert("RGBA")
        pixels = np.array(rgba, dtype=np.uint8)
        return cls(rgba.width, rgba.height, pixels)

    def to_image(self) -> ImageClass:
        """Return a new PIL Image in RGBA mode."""
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    def to_bytes(self) -> bytes:
        """Return the raw row-major RGBA bytes."""
        return self.pixels.tobytes()

    def copy(self) -> "PixelBuffer":
        """Return a deep copy that shares no memory with this buffer."""
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    def frozen_copy(self) -> "PixelBuffer":
        """Return a deep copy whose pixel array is read-only."""
        pixels = self.pixels.copy()
        pixels.setflags(write=False)
        return PixelBuffer(self.width, self.height, pixels)

    def get_pixel(self, x: int, y: int) -> RgbaColor:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def is_transparent(self) -> bool:
        """True when every pixel has alpha 0."""
        return not self.pixels[:, :, 3].any()
