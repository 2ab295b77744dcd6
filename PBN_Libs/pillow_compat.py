"""
Single import point for Pillow (the `PIL` namespace).

The painting pipeline needs four Pillow modules: `Image` for buffers and
compositing, `ImageDraw` for stroke rasterization, `ImageFilter` for the blur
prefilter and `ImageOps` for the grayscale sketch. They are loaded here via
importlib so a missing install fails once, with an install hint, instead of
at every `from PIL import ...` site.
"""
from importlib import import_module
from types import ModuleType

_INSTALL_HINT = "pillow (PIL) is required: install with 'pip install Pillow'"


def _require(name: str) -> ModuleType:
    try:
        return import_module(f"PIL.{name}")
    except ImportError as e:
        raise ImportError(f"{_INSTALL_HINT} (missing PIL.{name})") from e


Image = _require("Image")
ImageDraw = _require("ImageDraw")
ImageFilter = _require("ImageFilter")
ImageOps = _require("ImageOps")

# PIL.Image.Image, for type hints
ImageClass = Image.Image
