"""Configuration loading utilities for popularity analysis.

This package provides YAML-based configuration loading with environment
overrides for popularity settings.
"""

from .loader import (
    load_popularity_config,
    create_default_popularity_config,
    save_default_config,
    default_config_path,
    ConfigLoadError
)

__all__ = [
    "load_popularity_config",
    "create_default_popularity_config",
    "save_default_config",
    "default_config_path",
    "ConfigLoadError"
]
