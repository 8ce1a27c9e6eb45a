"""Configuration loader with YAML and environment variable support.

Reads ~/.config/promptblocks/config.yaml (when present) and applies
PROMPTBLOCKS_* environment overrides.

Environment variables:
- PROMPTBLOCKS_LIBRARY_PATH: Override library.blocks_path
- PROMPTBLOCKS_RENDER_MODE: Override render.mode ("final" or "preview")
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from promptblocks.models.config import DEFAULT_CONFIG_DIR, Config
from promptblocks.utils.logging import get_logger


logger = get_logger(__name__)


def default_config_path() -> Path:
    return DEFAULT_CONFIG_DIR / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    A missing file is not an error: defaults apply, then env overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/promptblocks/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If the file or an override is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        with config_path.open() as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                logger.error("config_yaml_error", path=str(config_path), error=str(e))
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        logger.info("config_loaded", path=str(config_path))
    else:
        logger.info("config_defaults", path=str(config_path))
        data = {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")

    data = _apply_env_overrides(data)

    try:
        return Config(**data)
    except Exception as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply PROMPTBLOCKS_SECTION_KEY environment overrides.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    if "library" not in data or data["library"] is None:
        data["library"] = {}
    if "render" not in data or data["render"] is None:
        data["render"] = {}

    if env_library := os.getenv("PROMPTBLOCKS_LIBRARY_PATH"):
        data["library"]["blocks_path"] = env_library

    if env_mode := os.getenv("PROMPTBLOCKS_RENDER_MODE"):
        data["render"]["mode"] = env_mode.lower()

    return data
