"""Image toolchain module"""

from .backends import BACKENDS, check_toolchain, get_toolchain
from .formats import FormatDetector, ImageFormat
from .magick_toolchain import MagickToolchain, escape_annotation_text
from .pillow_toolchain import PillowToolchain
from .toolchain import (
    METADATA_FIELDS,
    CompositeFailure,
    ConvertFailure,
    ImageToolchain,
    ProbeFailure,
    ResizeFailure,
    ToolchainError,
    ToolchainStatus,
    ToolUnavailable,
)

__all__ = [
    "BACKENDS",
    "check_toolchain",
    "get_toolchain",
    "FormatDetector",
    "ImageFormat",
    "ImageToolchain",
    "PillowToolchain",
    "MagickToolchain",
    "escape_annotation_text",
    "METADATA_FIELDS",
    "ToolchainStatus",
    "ToolchainError",
    "ToolUnavailable",
    "ProbeFailure",
    "ConvertFailure",
    "ResizeFailure",
    "CompositeFailure",
]
