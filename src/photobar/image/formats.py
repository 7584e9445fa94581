"""
Image Format Detection
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Set


class ImageFormat(Enum):
    """Supported source formats"""
    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    WEBP = "WEBP"


class FormatDetector:
    """Detect source image formats by extension"""
    
    SUPPORTED_EXTENSIONS: Set[str] = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}
    
    # Formats whose encoder takes a quality setting
    LOSSY_EXTENSIONS: Set[str] = {'.jpg', '.jpeg', '.webp'}
    
    @staticmethod
    def detect_format(file_path: Path) -> Optional[ImageFormat]:
        """
        Detect format from file extension.
        
        Args:
            file_path: Path to image file
            
        Returns:
            ImageFormat enum or None if unsupported
        """
        ext = file_path.suffix.lower()
        
        format_map = {
            '.jpg': ImageFormat.JPEG,
            '.jpeg': ImageFormat.JPEG,
            '.png': ImageFormat.PNG,
            '.gif': ImageFormat.GIF,
            '.webp': ImageFormat.WEBP,
        }
        
        return format_map.get(ext)
    
    @staticmethod
    def is_supported(file_path: Path) -> bool:
        """
        Check if the extension is accepted as pipeline input (case-insensitive).
        
        Args:
            file_path: Path to image file
            
        Returns:
            True if format is supported
        """
        return file_path.suffix.lower() in FormatDetector.SUPPORTED_EXTENSIONS
    
    @staticmethod
    def is_lossy(file_path: Path) -> bool:
        """Check if the output encoder for this path honours a quality setting"""
        return file_path.suffix.lower() in FormatDetector.LOSSY_EXTENSIONS
