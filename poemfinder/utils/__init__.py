# poemfinder/utils/__init__.py

from .logging_config import configure_logging, configure_logging_from_config

__all__ = ["configure_logging", "configure_logging_from_config"]
