"""
photobar - batch photo post-processing

For each source photo this library:
- reads camera model, f-number, exposure time and ISO (with APEX fallbacks)
- auto-orients and strips metadata
- produces a 1024px full-size tier and a 512px thumbnail tier
- burns a semi-transparent metadata bar onto the full-size tier

Example:
    >>> from photobar import process_image
    >>> from pathlib import Path
    >>> 
    >>> result = process_image(Path("images/IMG_0001.jpg"))
    >>> if result.success:
    ...     print(f"Camera: {result.metadata.model}")
"""

from .version import __version__

# Configuration
from .config import PipelineConfig, load_config, save_config

# Models
from .models import (
    ImageDimensions,
    MetadataRecord,
    ProcessingOutcome,
    ProcessingResult,
    WatermarkSpec,
)

# Image toolchain
from .image import (
    FormatDetector,
    ImageToolchain,
    MagickToolchain,
    PillowToolchain,
    ToolchainError,
    ToolchainStatus,
    ToolUnavailable,
    check_toolchain,
    get_toolchain,
)

# Metadata reading
from .metadata import MetadataReader

# Watermark
from .watermark import WatermarkCompositor, compute_watermark_spec, format_watermark_text

# Pipeline
from .pipeline import FallbackFailure, ImagePipeline

# High-level API
from .api import batch_process, process_image

__all__ = [
    # Version
    "__version__",
    # Config
    "PipelineConfig",
    "load_config",
    "save_config",
    # Models
    "MetadataRecord",
    "ImageDimensions",
    "WatermarkSpec",
    "ProcessingOutcome",
    "ProcessingResult",
    # Toolchain
    "FormatDetector",
    "ImageToolchain",
    "PillowToolchain",
    "MagickToolchain",
    "ToolchainStatus",
    "ToolchainError",
    "ToolUnavailable",
    "check_toolchain",
    "get_toolchain",
    # Metadata
    "MetadataReader",
    # Watermark
    "WatermarkCompositor",
    "compute_watermark_spec",
    "format_watermark_text",
    # Pipeline
    "ImagePipeline",
    "FallbackFailure",
    # High-level API
    "process_image",
    "batch_process",
]
