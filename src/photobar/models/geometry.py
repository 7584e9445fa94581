"""
Geometry Models

Image dimensions and the derived watermark bar layout.
"""

from dataclasses import dataclass


# Left inset of the watermark text, in pixels
TEXT_MARGIN = 20


@dataclass(frozen=True)
class ImageDimensions:
    """
    Dimensions of the working image at the time it is probed.
    
    Attributes:
        width: Width in pixels
        height: Height in pixels
    """
    width: int
    height: int


@dataclass(frozen=True)
class WatermarkSpec:
    """
    Layout of the metadata bar for one image.
    
    Attributes:
        point_size: Text size in points
        bar_height: Height of the bar in pixels
        bar_top: Y coordinate of the bar's top edge (never negative)
        text_offset: Distance from the bottom edge to the text baseline
    """
    point_size: int
    bar_height: int
    bar_top: int
    text_offset: int
