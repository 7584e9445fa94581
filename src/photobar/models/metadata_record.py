"""
Metadata Record Model
"""

from dataclasses import dataclass


DEFAULT_MODEL = "Camera"


@dataclass(frozen=True)
class MetadataRecord:
    """
    Display-ready metadata for one source image.
    
    Always read from the original file, before its metadata is stripped.
    
    Attributes:
        model: Camera model (defaults to "Camera")
        f_number: F-number without the "f/" prefix (e.g. "2.8"), or ""
        exposure: Exposure time (e.g. "1/250" or "2.5s"), or ""
        iso: ISO sensitivity (e.g. "400"), or ""
    """
    model: str = DEFAULT_MODEL
    f_number: str = ""
    exposure: str = ""
    iso: str = ""
