"""
Configuration handling for photobar.

Output sizes and encoder qualities are fixed per tier and are not part of the
configuration.
"""

import json
import os
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


BACKENDS = ("pillow", "magick")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

FULLS_DIRNAME = "fulls"
THUMBS_DIRNAME = "thumbs"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    input_dir: str = "images"
    full_dir: Optional[str] = None  # default: {input_dir}/fulls
    thumb_dir: Optional[str] = None  # default: {input_dir}/thumbs
    work_dir: Optional[str] = None  # default: a temporary directory per image
    backend: str = "pillow"
    font_path: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    debug_mode: bool = False

    def resolved_full_dir(self) -> str:
        return self.full_dir or os.path.join(self.input_dir, FULLS_DIRNAME)

    def resolved_thumb_dir(self) -> str:
        return self.thumb_dir or os.path.join(self.input_dir, THUMBS_DIRNAME)

    def validate(self) -> None:
        """
        Raises:
            ValueError: If a setting has an unsupported value
        """
        if self.backend not in BACKENDS:
            raise ValueError(f"Unsupported toolchain backend: {self.backend} (expected one of {', '.join(BACKENDS)})")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {self.log_level}")
        if not self.input_dir:
            raise ValueError("Missing required configuration field: input_dir")


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${ENV_VAR} references in string values.
    
    Unset variables are replaced with an empty string.
    """
    if not isinstance(value, str):
        return value

    pattern = r'\${([^}]+)}'

    def replace_env_var(match):
        return os.environ.get(match.group(1), "")

    return re.sub(pattern, replace_env_var, value)


def load_config(config_path: str) -> PipelineConfig:
    """
    Load and validate configuration from a JSON file.
    
    Args:
        config_path: Path to the configuration JSON file
        
    Returns:
        PipelineConfig object
    
    Raises:
        ValueError: If the configuration is invalid
        RuntimeError: If the configuration file cannot be loaded
    """
    config_path = os.path.abspath(os.path.expanduser(config_path))

    try:
        with open(config_path, 'r') as cfg:
            config_dict = json.load(cfg)
    except (json.JSONDecodeError, IOError) as e:
        raise RuntimeError(f"Failed to load configuration from {config_path}: {str(e)}")

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration in {config_path} must be a JSON object")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(config_dict) - known)
    if unknown:
        raise ValueError(f"Unknown configuration fields: {', '.join(unknown)}")

    config_dict = {key: _substitute_env_vars(value) for key, value in config_dict.items()}
    config = PipelineConfig(**config_dict)
    config.validate()
    return config


def save_config(config: PipelineConfig, config_path: str) -> None:
    """
    Save configuration to a JSON file.
    
    Raises:
        RuntimeError: If the configuration cannot be saved
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(asdict(config), f, indent=2)
    except (IOError, TypeError) as e:
        raise RuntimeError(f"Failed to save configuration: {str(e)}")


def config_from_dict(values: Dict[str, Any]) -> PipelineConfig:
    """Build a validated config from keyword overrides, ignoring None values"""
    config = PipelineConfig(**{key: value for key, value in values.items() if value is not None})
    config.validate()
    return config
