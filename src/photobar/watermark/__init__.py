"""Watermark compositing module"""

from .compositor import (
    WatermarkCompositor,
    compute_watermark_spec,
    format_watermark_text,
    watermark_fragments,
)

__all__ = [
    "WatermarkCompositor",
    "compute_watermark_spec",
    "format_watermark_text",
    "watermark_fragments",
]
