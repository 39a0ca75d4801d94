# poemfinder/config/__init__.py

from .config_manager import (
    ApiConfig,
    SearchConfig,
    LoggingConfig,
    ConfigManager,
    get_config_manager
)

__all__ = [
    "ApiConfig",
    "SearchConfig",
    "LoggingConfig",
    "ConfigManager",
    "get_config_manager"
]
