"""Image pipeline module"""

from .processor import (
    FALLBACK_THUMB_POINT_SIZE,
    FULL_BOX,
    THUMB_BOX,
    FallbackFailure,
    ImagePipeline,
    TierPaths,
    placeholder_text,
)

__all__ = [
    "ImagePipeline",
    "FallbackFailure",
    "TierPaths",
    "placeholder_text",
    "FULL_BOX",
    "THUMB_BOX",
    "FALLBACK_THUMB_POINT_SIZE",
]
