"""
Image Toolchain

The five image operations the pipeline depends on, independent of whether
they run in-process or through an external command:

- metadata field extraction
- dimension probing
- auto-orient + metadata strip
- bounded resize
- bar fill + text annotation
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from ..models.geometry import ImageDimensions, WatermarkSpec


# Candidate metadata fields, queried together in one pass
METADATA_FIELDS: Tuple[str, ...] = (
    "Model",
    "FNumber",
    "ApertureValue",
    "ExposureTime",
    "ShutterSpeedValue",
    "ISOSpeedRatings",
    "PhotographicSensitivity",
)


class ToolchainError(Exception):
    """Base class for image toolchain failures"""
    
    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class ToolUnavailable(ToolchainError):
    """The toolchain cannot be invoked at all"""


class ProbeFailure(ToolchainError):
    """Reading an image header or its metadata failed"""


class ConvertFailure(ToolchainError):
    """Auto-orient/strip conversion failed"""


class ResizeFailure(ToolchainError):
    """Bounded resize failed"""


class CompositeFailure(ToolchainError):
    """Drawing the metadata bar failed"""


@dataclass(frozen=True)
class ToolchainStatus:
    """
    Result of the up-front availability check.
    
    Attributes:
        backend: Backend name ("pillow" or "magick")
        available: True if the backend can process images
        reason: Why the backend is unavailable
    """
    backend: str
    available: bool
    reason: Optional[str] = None


class ImageToolchain:
    """Interface implemented by every toolchain backend"""
    
    name = "base"
    
    def read_fields(self, path: Path, fields: Sequence[str] = METADATA_FIELDS) -> Dict[str, str]:
        """
        Read raw metadata values as strings.
        
        Args:
            path: Image file
            fields: Field names to query
            
        Returns:
            Mapping of every requested field to its raw value ("" if absent)
            
        Raises:
            ProbeFailure: If the file cannot be read
        """
        raise NotImplementedError
    
    def probe(self, path: Path) -> ImageDimensions:
        """Return the image dimensions, raising ProbeFailure if unreadable"""
        raise NotImplementedError
    
    def normalize(self, source: Path, target: Path) -> None:
        """Auto-orient and strip metadata into target, raising ConvertFailure"""
        raise NotImplementedError
    
    def resize(self, source: Path, target: Path, box: Tuple[int, int], quality: int) -> None:
        """Shrink to fit within box (aspect preserved), raising ResizeFailure"""
        raise NotImplementedError
    
    def annotate(
        self,
        source: Path,
        target: Path,
        dimensions: ImageDimensions,
        spec: WatermarkSpec,
        text: str,
        quality: Optional[int] = None
    ) -> None:
        """Draw the bar and text described by spec, raising CompositeFailure"""
        raise NotImplementedError
