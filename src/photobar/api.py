"""
High-level API for photobar

Convenience functions for processing images.
"""

from pathlib import Path
from typing import Callable, List, Optional

from .config import FULLS_DIRNAME, THUMBS_DIRNAME
from .image.backends import get_toolchain
from .models.processing_result import ProcessingResult
from .pipeline.processor import ImagePipeline


def process_image(
    image_path: Path,
    full_dir: Optional[Path] = None,
    thumb_dir: Optional[Path] = None,
    backend: str = "pillow",
    font_path: Optional[str] = None
) -> ProcessingResult:
    """
    Produce the watermarked full-size tier and the thumbnail tier of one image.
    
    Args:
        image_path: Path to the original image
        full_dir: Full-size destination (default: fulls/ next to the image)
        thumb_dir: Thumbnail destination (default: thumbs/ next to the image)
        backend: Toolchain backend, "pillow" or "magick"
        font_path: Optional TTF/OTF font for the watermark text
        
    Returns:
        ProcessingResult (outcome SUCCESS, FALLBACK_SUCCESS or FAILURE)
        
    Raises:
        ToolUnavailable: If the backend cannot be used
        
    Example:
        >>> from pathlib import Path
        >>> from photobar import process_image
        >>> 
        >>> result = process_image(Path("images/IMG_0001.jpg"))
        >>> if result.success:
        ...     print(f"{result.metadata.model}: {result.full_path}")
    """
    image_path = Path(image_path)
    toolchain = get_toolchain(backend, font_path=font_path)
    pipeline = ImagePipeline(
        toolchain,
        full_dir=full_dir or image_path.parent / FULLS_DIRNAME,
        thumb_dir=thumb_dir or image_path.parent / THUMBS_DIRNAME,
    )
    return pipeline.process_file(image_path)


def batch_process(
    image_paths: List[Path],
    full_dir: Path,
    thumb_dir: Path,
    backend: str = "pillow",
    font_path: Optional[str] = None,
    progress_callback: Optional[Callable[[int, int, ProcessingResult], None]] = None
) -> List[ProcessingResult]:
    """
    Process multiple images sequentially with optional progress tracking.
    
    The toolchain is checked once before the first image.
    
    Args:
        image_paths: List of paths to image files
        full_dir: Full-size destination directory
        thumb_dir: Thumbnail destination directory
        backend: Toolchain backend, "pillow" or "magick"
        font_path: Optional TTF/OTF font for the watermark text
        progress_callback: Optional callback(current, total, result)
        
    Returns:
        List of ProcessingResult objects
        
    Example:
        >>> from pathlib import Path
        >>> from photobar import batch_process
        >>> 
        >>> images = sorted(Path("./images").glob("*.jpg"))
        >>> 
        >>> def on_progress(current, total, result):
        ...     mark = "✓" if result.success else "✗"
        ...     print(f"[{current}/{total}] {mark} {result.source.name}")
        >>> 
        >>> results = batch_process(images, Path("fulls"), Path("thumbs"),
        ...                         progress_callback=on_progress)
    """
    toolchain = get_toolchain(backend, font_path=font_path)
    pipeline = ImagePipeline(toolchain, full_dir=full_dir, thumb_dir=thumb_dir)
    
    results = []
    total = len(image_paths)
    
    for i, path in enumerate(image_paths, 1):
        result = pipeline.process_file(Path(path))
        results.append(result)
        
        if progress_callback:
            progress_callback(i, total, result)
    
    return results
