"""
Configuration management for PasillaFlow

This module provides configuration loading, validation, and management
for the differential expression pipeline.
"""

from .config import Config, get_default_config, load_config, save_config, validate_config
from .paths import PathConfig

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "validate_config",
    "get_default_config",
    "PathConfig",
]
