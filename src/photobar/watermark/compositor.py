"""
Watermark Compositing

Burns a semi-transparent metadata bar onto the bottom edge of an image.
Geometry is derived from the image as it is now (after any resize), so
watermarking the same image twice puts the bar in the same place.
"""

from pathlib import Path
from typing import List, Optional

from ..image.toolchain import ImageToolchain
from ..logging_setup import get_logger
from ..models.metadata_record import MetadataRecord
from ..models.geometry import ImageDimensions, WatermarkSpec

logger = get_logger(__name__)

MIN_POINT_SIZE = 14
POINT_SIZE_RATIO = 0.028
MIN_BAR_HEIGHT = 50
BAR_HEIGHT_RATIO = 2.2
TEXT_OFFSET_RATIO = 0.35

CAMERA_ICON = "📷"
BULLET = "●"
SEPARATOR = "   "


def compute_watermark_spec(dimensions: ImageDimensions, point_size: Optional[int] = None) -> WatermarkSpec:
    """
    Compute bar geometry for an image.
    
    Args:
        dimensions: Current image dimensions
        point_size: Fixed text size; scaled from the width when omitted
        
    Returns:
        WatermarkSpec with the bar clamped inside the image
    """
    if point_size is None:
        point_size = max(MIN_POINT_SIZE, round(dimensions.width * POINT_SIZE_RATIO))
    
    bar_height = max(MIN_BAR_HEIGHT, round(point_size * BAR_HEIGHT_RATIO))
    
    return WatermarkSpec(
        point_size=point_size,
        bar_height=bar_height,
        bar_top=max(0, dimensions.height - bar_height),
        text_offset=round(bar_height * TEXT_OFFSET_RATIO),
    )


def watermark_fragments(metadata: MetadataRecord) -> List[str]:
    """Display fragments for the fields that are present, in bar order"""
    fragments = [f"{CAMERA_ICON} {metadata.model}"]
    if metadata.f_number:
        fragments.append(f"{BULLET} f/{metadata.f_number}")
    if metadata.exposure:
        fragments.append(f"{BULLET} {metadata.exposure}")
    if metadata.iso:
        fragments.append(f"{BULLET} ISO {metadata.iso}")
    return fragments


def format_watermark_text(metadata: MetadataRecord) -> str:
    """
    Build the single line shown in the bar.
    
    >>> format_watermark_text(MetadataRecord("Nikon D90", "2.8", "1/250", "400"))
    '📷 Nikon D90   ● f/2.8   ● 1/250   ● ISO 400'
    """
    return SEPARATOR.join(watermark_fragments(metadata))


class WatermarkCompositor:
    """Applies the metadata bar through an image toolchain"""
    
    def __init__(self, toolchain: ImageToolchain):
        self.toolchain = toolchain
    
    def apply_watermark(
        self,
        input_path: Path,
        output_path: Path,
        metadata: MetadataRecord,
        point_size: Optional[int] = None,
        quality: Optional[int] = None
    ) -> WatermarkSpec:
        """
        Write input_path with the metadata bar to output_path.
        
        Input and output may be the same file.
        
        Args:
            input_path: Image to watermark
            output_path: Destination image
            metadata: Resolved metadata; empty fields are left out of the text
            point_size: Optional fixed text size
            quality: Encoder quality for lossy outputs
            
        Returns:
            The WatermarkSpec that was drawn
            
        Raises:
            ProbeFailure: If the image cannot be probed
            CompositeFailure: If drawing fails
        """
        dimensions = self.toolchain.probe(input_path)
        spec = compute_watermark_spec(dimensions, point_size)
        text = format_watermark_text(metadata)
        
        logger.debug(
            f"Watermarking {input_path.name} ({dimensions.width}x{dimensions.height}): "
            f"bar {spec.bar_height}px at y={spec.bar_top}, {spec.point_size}pt text {text!r}"
        )
        
        self.toolchain.annotate(input_path, output_path, dimensions, spec, text, quality=quality)
        return spec
