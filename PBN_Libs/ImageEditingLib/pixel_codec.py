"""
Pixel buffer codec for Paint By Neon.

Encodes PixelBuffers to PNG bytes and decodes any Pillow-readable image back
into an RGBA PixelBuffer. PNG is lossless, so encode/decode cycles are bit
exact for color and alpha channels. Also provides data-URI helpers used by
the project file format.

Functions:
    encode_pixel_buffer: PixelBuffer -> PNG bytes
    decode_pixel_buffer: image bytes -> PixelBuffer
    to_data_url: PNG bytes -> 'data:image/png;base64,...'
    from_data_url: data URI (or bare base64) -> bytes
    pixel_buffer_to_data_url: PixelBuffer -> data URI
    pixel_buffer_from_data_url: data URI -> PixelBuffer
"""

import base64
import binascii
import io

from PBN_Libs.constants import DATA_URL_PREFIX, DEFAULT_OUTPUT_FORMAT
from PBN_Libs.errors import ContextError, DecodeError
from PBN_Libs.ImageEditingLib.image_models import PixelBuffer
from PBN_Libs.pillow_compat import Image


def encode_pixel_buffer(buffer: PixelBuffer) -> bytes:
    """
    Encode a buffer as PNG.

    Args:
        buffer: PixelBuffer to encode

    Returns:
        PNG file bytes

    Raises:
        ContextError: If Pillow cannot render the buffer to PNG
    """
    if buffer.width == 0 or buffer.height == 0:
        raise ContextError(f"Cannot encode empty buffer {buffer.width}x{buffer.height}")

    output = io.BytesIO()
    try:
        buffer.to_image().save(output, format=DEFAULT_OUTPUT_FORMAT)
    except (OSError, ValueError) as e:
        raise ContextError(f"Could not encode pixel buffer: {e}") from e
    return output.getvalue()


def decode_pixel_buffer(data: bytes) -> PixelBuffer:
    """
    Decode image bytes into an RGBA buffer.

    Args:
        data: Bytes of any image format Pillow can read

    Returns:
        Decoded PixelBuffer (RGBA)

    Raises:
        DecodeError: If the bytes are not a decodable image
    """
    if not data:
        raise DecodeError("No image data")

    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return PixelBuffer.from_image(image)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e


def to_data_url(data: bytes) -> str:
    return DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")


def from_data_url(text: str) -> bytes:
    """
    Extract the payload bytes of a base64 data URI.

    Accepts 'data:<mime>;base64,<payload>' or a bare base64 payload.

    Raises:
        DecodeError: If the text is not valid base64
    """
    if not isinstance(text, str) or not text:
        raise DecodeError("Image data must be a non-empty string")

    payload = text
    if text.startswith("data:"):
        header, sep, payload = text.partition(",")
        if not sep or not header.endswith(";base64"):
            raise DecodeError("Image data URI is not base64 encoded")

    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Failed to load image from base64 string: {e}") from e


def pixel_buffer_to_data_url(buffer: PixelBuffer) -> str:
    return to_data_url(encode_pixel_buffer(buffer))


def pixel_buffer_from_data_url(text: str) -> PixelBuffer:
    return decode_pixel_buffer(from_data_url(text))
