"""
Logging configuration for photobar.
"""

import logging
import os
import sys

from .config import PipelineConfig


LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(config: PipelineConfig) -> None:
    """
    Configure logging based on settings.
    
    Logs go to config.log_file when set (mirrored to the console in debug
    mode), otherwise to the console.
    
    Args:
        config: Pipeline configuration
    """
    log_level = logging.DEBUG if config.debug_mode else getattr(logging, config.log_level)
    
    if config.log_file:
        log_dir = os.path.dirname(config.log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)
        
        logging.basicConfig(
            filename=config.log_file,
            level=log_level,
            format=LOG_FORMAT,
            force=True
        )
        
        if config.debug_mode:
            console = logging.StreamHandler(sys.stdout)
            console.setLevel(log_level)
            console.setFormatter(logging.Formatter(LOG_FORMAT))
            logging.getLogger('').addHandler(console)
    else:
        logging.basicConfig(
            level=log_level,
            format=LOG_FORMAT,
            force=True
        )
    
    logging.info(f"Logging initialized. Using toolchain backend: {config.backend}")
    
    if config.debug_mode:
        logging.debug("Debug mode enabled")
        logging.debug(f"Python version: {sys.version}")
        logging.debug(f"Platform: {sys.platform}")
        logging.debug(f"Input directory: {config.input_dir}")
        logging.debug(f"Full-size directory: {config.resolved_full_dir()}")
        logging.debug(f"Thumbnail directory: {config.resolved_thumb_dir()}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.
    
    Args:
        name: Name for the logger
        
    Returns:
        Logger instance
    """
    return logging.getLogger(name)
