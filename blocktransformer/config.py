"""
Configuration management for blocktransformer.

This module handles loading and accessing configuration values from config.yaml.
Values missing from the file fall back to the built-in defaults, so a partial
config file only needs to name what it changes.
"""

import copy
import yaml
from pathlib import Path
from typing import Any, Dict, List
import logging


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Manages configuration loading and access for blocktransformer.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        defaults = self._get_default_config()
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

            self._config = _merge(defaults, loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError, ValueError) as e:
            logging.warning(f"Failed to load configuration, using defaults: {e}")
            self._config = defaults

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "database": {
                "filename": "blocktransformer.db"
            },
            "paths": {
                "log_file": "blocktransformer.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "transform": {
                "token_prefix": "[BT:",
                "progress_interval": 25
            },
            "selection": {
                "post_types": ["post"],
                "post_status": "publish"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "transform.token_prefix")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("database.filename")  # Returns "blocktransformer.db"
            config.get("transform.progress_interval")  # Returns 25
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("database.filename", "blocktransformer.db")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "blocktransformer.log")

    @property
    def token_prefix(self) -> str:
        """Get the prefix written on encoded tokens."""
        return self.get("transform.token_prefix", "[BT:")

    @property
    def progress_interval(self) -> int:
        """Get how many documents pass between progress lines."""
        return int(self.get("transform.progress_interval", 25))

    @property
    def post_types(self) -> List[str]:
        """Get the default post types to select."""
        post_types = self.get("selection.post_types", ["post"])
        if isinstance(post_types, str):
            post_types = [t.strip() for t in post_types.split(",") if t.strip()]
        return post_types

    @property
    def post_status(self) -> str:
        """Get the default post status to select."""
        return self.get("selection.post_status", "publish")
