"""
ImageEditingLib - Core image processing functionality

This module provides the pixel buffer model, PNG codec, color quantizer,
color highlighter, and the upload and export pipelines for Paint By Neon.
"""

from PBN_Libs.ImageEditingLib.image_models import (
    PixelBuffer,
    RgbColor,
    RgbaColor,
    hex_to_rgb,
    rgb_to_hex,
)
from PBN_Libs.ImageEditingLib.pixel_codec import (
    encode_pixel_buffer,
    decode_pixel_buffer,
    pixel_buffer_to_data_url,
    pixel_buffer_from_data_url,
)
from PBN_Libs.ImageEditingLib.color_quantizer import (
    QuantizeResult,
    quantize_image,
    extract_palette,
    color_distance,
)
from PBN_Libs.ImageEditingLib.color_matcher import (
    colors_match,
    create_color_highlight,
    count_matching_pixels,
)
from PBN_Libs.ImageEditingLib.upload_ops import UploadResult, process_upload
from PBN_Libs.ImageEditingLib.export_ops import export_painting, flatten_layers, save_export

__all__ = [
    "PixelBuffer",
    "RgbColor",
    "RgbaColor",
    "hex_to_rgb",
    "rgb_to_hex",
    "encode_pixel_buffer",
    "decode_pixel_buffer",
    "pixel_buffer_to_data_url",
    "pixel_buffer_from_data_url",
    "QuantizeResult",
    "quantize_image",
    "extract_palette",
    "color_distance",
    "colors_match",
    "create_color_highlight",
    "count_matching_pixels",
    "UploadResult",
    "process_upload",
    "export_painting",
    "flatten_layers",
    "save_export",
]
