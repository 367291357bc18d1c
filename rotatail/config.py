"""
Configuration management for rotatail.

Loads config from file with sensible defaults. No magic, no surprises.
"""

import json
import logging
import os

from pathlib import Path

from .types import TailerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./rotatail_config.json"
CONFIG_ENV_VAR = "ROTATAIL_CONFIG"


def load_config(config_path: str | None = None) -> TailerConfig:
    """
    Load configuration from file, with fallback to defaults.

    Priority:
    1. Explicit config_path argument
    2. ROTATAIL_CONFIG environment variable
    3. Default path (./rotatail_config.json)
    4. Built-in defaults

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist
        ValueError: If the file holds invalid settings
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    path = explicit or DEFAULT_CONFIG_PATH

    if Path(path).exists():
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"Loaded configuration from {path}")
        return TailerConfig.from_dict(data)

    if explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    # Return defaults if no config file
    return TailerConfig()


def save_config(config: TailerConfig, config_path: str | None = None) -> None:
    """
    Save configuration to file.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    Path(path).parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def create_default_config_file(path: str = DEFAULT_CONFIG_PATH) -> None:
    """Create a default configuration file for users to customize."""
    save_config(TailerConfig(), path)
    print(f"Created default config at: {path}")
