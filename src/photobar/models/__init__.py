"""Data models for photobar"""

from .geometry import TEXT_MARGIN, ImageDimensions, WatermarkSpec
from .metadata_record import MetadataRecord
from .processing_result import ProcessingOutcome, ProcessingResult

__all__ = [
    "ImageDimensions",
    "WatermarkSpec",
    "TEXT_MARGIN",
    "MetadataRecord",
    "ProcessingOutcome",
    "ProcessingResult",
]
