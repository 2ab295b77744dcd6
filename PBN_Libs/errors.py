"""
Error taxonomy for Paint By Neon.

Library code raises these; the session boundary (upload, save, load, export)
catches them and turns them into user-facing messages.
"""

VALIDATION_MISSING_VERSION = "missing-version"
VALIDATION_MISSING_IMAGES = "missing-images"
VALIDATION_MISSING_CANVAS = "missing-canvas"
VALIDATION_MISSING_SETTINGS = "missing-settings"
VALIDATION_INVALID_FORMAT = "invalid-format"


class PBNError(Exception):
    """Base class for all Paint By Neon errors."""


class CodecError(PBNError):
    """Raised when a pixel buffer cannot be encoded or decoded."""


class DecodeError(CodecError):
    """Raised when bytes are not a decodable image."""


class ContextError(CodecError):
    """Raised when a rendering surface cannot be produced for encoding."""


class ValidationError(PBNError):
    """Raised when a project document is malformed or incomplete.

    Attributes:
        kind: One of the VALIDATION_* constants
    """

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class FormatError(PBNError):
    """Raised when a project file has the wrong extension."""


class SessionStateError(PBNError):
    """Raised when an engine operation is invalid in the current lifecycle state."""
