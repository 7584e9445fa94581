"""
Command-line interface for photobar.
"""

import argparse
import sys
from typing import List, Optional

from .config import BACKENDS, PipelineConfig, config_from_dict, load_config
from .image.backends import check_toolchain, get_toolchain
from .image.toolchain import ToolUnavailable
from .logging_setup import get_logger, setup_logging
from .pipeline.processor import ImagePipeline

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_PLACEHOLDERS = 1
EXIT_FATAL = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.
    
    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Resize photos into full-size and thumbnail tiers and burn an EXIF bar onto the full size"
    )
    
    parser.add_argument(
        "input_dir",
        nargs="?",
        help="Directory of source images (default: images, or input_dir from --config)"
    )
    
    parser.add_argument(
        "--config",
        help="Path to configuration JSON file"
    )
    
    parser.add_argument(
        "--full-dir",
        help="Output directory for watermarked full-size images (default: INPUT_DIR/fulls)"
    )
    
    parser.add_argument(
        "--thumb-dir",
        help="Output directory for thumbnails (default: INPUT_DIR/thumbs)"
    )
    
    parser.add_argument(
        "--work-dir",
        help="Directory for scratch copies (default: a temporary directory)"
    )
    
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        help="Image toolchain: in-process Pillow or the ImageMagick CLI (default: pillow)"
    )
    
    parser.add_argument(
        "--font",
        dest="font_path",
        help="Path to a .ttf/.otf font for the watermark text"
    )
    
    parser.add_argument(
        "--log-file",
        help="Write logs to this file instead of the console"
    )
    
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging regardless of config setting"
    )
    
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """
    Merge the config file (if any) with command-line overrides.
    
    Raises:
        ValueError: If a setting is invalid
        RuntimeError: If the config file cannot be read
    """
    overrides = {
        "input_dir": args.input_dir,
        "full_dir": args.full_dir,
        "thumb_dir": args.thumb_dir,
        "work_dir": args.work_dir,
        "backend": args.backend,
        "font_path": args.font_path,
        "log_file": args.log_file,
        "debug_mode": True if args.debug else None,
    }
    
    if args.config:
        config = load_config(args.config)
        for key, value in overrides.items():
            if value is not None:
                setattr(config, key, value)
        config.validate()
        return config
    
    return config_from_dict(overrides)


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the pipeline over a directory.
    
    Returns:
        0 if every image was produced, 1 if any placeholder was written,
        2 if the run could not start
    """
    args = parse_arguments(argv)
    
    try:
        config = build_config(args)
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    
    setup_logging(config)
    
    status = check_toolchain(config.backend)
    if not status.available:
        logger.error(f"Image toolchain unavailable: {status.reason}")
        return EXIT_FATAL
    
    try:
        toolchain = get_toolchain(config.backend, font_path=config.font_path)
        pipeline = ImagePipeline(
            toolchain,
            full_dir=config.resolved_full_dir(),
            thumb_dir=config.resolved_thumb_dir(),
            work_dir=config.work_dir,
        )
        results = pipeline.process_directory(config.input_dir)
    except ToolUnavailable as e:
        logger.error(f"Image toolchain unavailable: {e}")
        return EXIT_FATAL
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_FATAL
    
    if any(result.failed for result in results):
        return EXIT_PLACEHOLDERS
    return EXIT_OK


def main() -> int:
    """Console script entry point."""
    return run_cli()


if __name__ == "__main__":
    sys.exit(main())
