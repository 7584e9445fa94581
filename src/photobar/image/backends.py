"""
Toolchain Selection

Availability is checked once, up front, before any file is processed.
"""

from typing import Optional

from PIL import features

from ..config import BACKENDS
from .magick_toolchain import MagickToolchain, find_commands
from .pillow_toolchain import PillowToolchain
from .toolchain import ImageToolchain, ToolchainStatus, ToolUnavailable


def check_toolchain(backend: str = "pillow") -> ToolchainStatus:
    """
    Check whether a backend can process images.
    
    Args:
        backend: "pillow" or "magick"
        
    Returns:
        ToolchainStatus (never raises)
    """
    if backend == "pillow":
        missing = [codec for codec in ("jpg", "zlib") if not features.check_codec(codec)]
        if missing:
            return ToolchainStatus(
                backend=backend,
                available=False,
                reason=f"Pillow was built without codecs: {', '.join(missing)}"
            )
        return ToolchainStatus(backend=backend, available=True)
    
    if backend == "magick":
        if find_commands() is None:
            return ToolchainStatus(
                backend=backend,
                available=False,
                reason="missing ImageMagick (need `magick` or both `convert` + `identify`)"
            )
        return ToolchainStatus(backend=backend, available=True)
    
    return ToolchainStatus(
        backend=backend,
        available=False,
        reason=f"Unknown toolchain backend: {backend} (expected one of {', '.join(BACKENDS)})"
    )


def get_toolchain(backend: str = "pillow", font_path: Optional[str] = None) -> ImageToolchain:
    """
    Build the toolchain for a backend.
    
    Raises:
        ToolUnavailable: If check_toolchain() reports the backend unavailable
    """
    status = check_toolchain(backend)
    if not status.available:
        raise ToolUnavailable(status.reason)
    
    if backend == "magick":
        return MagickToolchain.detect(font_path=font_path)
    return PillowToolchain(font_path=font_path)
