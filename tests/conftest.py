"""
Pytest configuration and shared fixtures for Paint By Neon tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

import random

import numpy as np
import pytest

from PBN_Libs.config import PaintSessionConfig
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.ImageEditingLib.pixel_codec import encode_pixel_buffer
from PBN_Libs.PaintEngineLib.paint_engine import PaintEngine
from PBN_Libs.session import PaintSession


@pytest.fixture
def temp_project_dir(tmp_path):
    """
    Provide a temporary directory for project files.

    Args:
        tmp_path: Pytest's built-in temporary directory fixture

    Returns:
        Path object pointing to a temporary directory
    """
    return tmp_path


@pytest.fixture
def sample_rgba_colors():
    """
    Provide a list of sample RGBA color tuples for testing.

    Returns:
        List of (R, G, B, A) tuples with common test colors
    """
    return [
        (255, 0, 0, 255),    # Red
        (0, 255, 0, 255),    # Green
        (0, 0, 255, 255),    # Blue
        (255, 255, 255, 255),  # White
        (0, 0, 0, 255),      # Black
        (128, 128, 128, 255),  # Gray
    ]


@pytest.fixture
def sketch_buffer():
    """An opaque 40x30 light gray sketch."""
    return PixelBuffer.filled(40, 30, (200, 200, 200, 255))


@pytest.fixture
def photo_buffer():
    """A 16x8 image: red on the left half, blue on the right half."""
    pixels = np.zeros((8, 16, 4), dtype=np.uint8)
    pixels[:, :8] = (255, 0, 0, 255)
    pixels[:, 8:] = (0, 0, 255, 255)
    return PixelBuffer(16, 8, pixels)


@pytest.fixture
def photo_png(photo_buffer):
    """PNG bytes of photo_buffer."""
    return encode_pixel_buffer(photo_buffer)


@pytest.fixture
def ready_engine(sketch_buffer):
    """A two-layer engine with the sketch loaded and ready for strokes."""
    engine = PaintEngine(layer_count=2)
    engine.load_sketch(sketch_buffer)
    engine.mark_ready()
    return engine


@pytest.fixture
def session():
    """A session without blur prefilter and with a seeded random source."""
    paint_session = PaintSession(
        config=PaintSessionConfig(prefilter_radius=0),
        rng=random.Random(1234),
    )
    yield paint_session
    paint_session.close()


@pytest.fixture
def loaded_session(session, photo_png):
    """A session with photo_png uploaded."""
    result = session.upload_image(photo_png)
    assert result.success
    return session
