"""Configuration loading for oddments."""
from __future__ import annotations

from .manager import ConfigManager, clear_config_cache, get_section, load_config

__all__ = ["ConfigManager", "load_config", "get_section", "clear_config_cache"]
