"""
Session configuration for Paint By Neon.

Classes:
    PaintSessionConfig: Tunable parameters of the upload, highlight and
        painting pipeline, with dictionary round-tripping for settings files.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from PBN_Libs.constants import (
    DEFAULT_COLOR_LEVELS,
    DEFAULT_COLOR_THRESHOLD,
    DEFAULT_HIGHLIGHT_TOLERANCE,
    DEFAULT_PAINT_LAYER_COUNT,
    DEFAULT_PREFILTER_RADIUS,
    TIE_BREAK_CLOSEST,
    TIE_BREAK_FIRST,
)


@dataclass
class PaintSessionConfig:
    """Configuration for a painting session.

    Attributes:
        color_levels: Quantization granularity per channel
        color_threshold: Euclidean RGB distance under which colors merge
        tie_break: Bucket matching rule ('closest' or 'first')
        highlight_tolerance: Per-channel tolerance of the color highlighter
        paint_layer_count: Number of paintable layers (ids 1..N)
        max_history: Maximum history entries kept (None = unlimited)
        prefilter_radius: Gaussian blur radius applied before quantizing
                          (0 disables the prefilter)
    """
    color_levels: int = DEFAULT_COLOR_LEVELS
    color_threshold: float = DEFAULT_COLOR_THRESHOLD
    tie_break: str = TIE_BREAK_CLOSEST
    highlight_tolerance: int = DEFAULT_HIGHLIGHT_TOLERANCE
    paint_layer_count: int = DEFAULT_PAINT_LAYER_COUNT
    max_history: Optional[int] = None
    prefilter_radius: float = DEFAULT_PREFILTER_RADIUS

    def __post_init__(self):
        """Validate configuration values."""
        if self.color_levels < 1:
            raise ValueError(f"color_levels must be >= 1, got {self.color_levels}")

        if self.color_threshold < 0:
            raise ValueError(f"color_threshold must be >= 0, got {self.color_threshold}")

        if self.tie_break not in (TIE_BREAK_CLOSEST, TIE_BREAK_FIRST):
            raise ValueError(f"Unsupported tie_break: {self.tie_break}")

        if self.highlight_tolerance < 0:
            raise ValueError(
                f"highlight_tolerance must be >= 0, got {self.highlight_tolerance}"
            )

        if self.paint_layer_count < 1:
            raise ValueError(
                f"paint_layer_count must be >= 1, got {self.paint_layer_count}"
            )

        if self.max_history is not None and self.max_history < 1:
            raise ValueError(f"max_history must be >= 1, got {self.max_history}")

        if self.prefilter_radius < 0:
            raise ValueError(
                f"prefilter_radius must be >= 0, got {self.prefilter_radius}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaintSessionConfig":
        """Create from dictionary, ignoring unknown keys."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)
