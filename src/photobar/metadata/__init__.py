"""Metadata reading module"""

from .exif_reader import (
    DecimalValue,
    ExifValue,
    MetadataReader,
    MetadataRecord,
    RationalValue,
    Unresolved,
    format_decimal,
    format_exposure_seconds,
    parse_rational,
)

__all__ = [
    "MetadataReader",
    "MetadataRecord",
    "ExifValue",
    "Unresolved",
    "RationalValue",
    "DecimalValue",
    "parse_rational",
    "format_decimal",
    "format_exposure_seconds",
]
