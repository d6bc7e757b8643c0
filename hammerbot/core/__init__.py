"""
HammerBot - Core Package
========================

Configuration, constants and logging shared by every other package.

DESIGN:
    Core modules are singletons or global instances:
    - get_config() returns the same Config instance
    - logger is a global TreeLogger instance
"""

from .config import Config, ConfigValidationError, get_config, load_config
from .logger import NY_TZ, TreeLogger, logger


__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "get_config",
    "load_config",
    # Logger
    "NY_TZ",
    "TreeLogger",
    "logger",
]
