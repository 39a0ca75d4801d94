import logging
from typing import Optional, Union

from poemfinder.config.config_manager import DEFAULT_LOG_FORMAT, LoggingConfig


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).strip().upper(), logging.INFO)


def configure_logging(level: Union[str, int] = logging.INFO, suppress_http: bool = True,
                      fmt: str = DEFAULT_LOG_FORMAT, log_file: Optional[str] = None):
    """
    Configure logging for poemfinder.

    Args:
        level: Logging level name or number (default: INFO)
        suppress_http: Whether to suppress HTTP request logs (default: True)
        fmt: Log record format
        log_file: Optional file that also receives log records
    """
    resolved = _resolve_level(level)

    # Basic logging configuration
    logging.basicConfig(
        level=resolved,
        format=fmt,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
        logging.getLogger().addHandler(file_handler)

    if suppress_http:
        # Suppress HTTP request logs from the transport libraries
        for logger_name in ["requests", "urllib3", "urllib3.connectionpool"]:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

        # asyncio debug chatter from the executor hand-off
        logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Set root logger level
    logging.getLogger().setLevel(resolved)

    return logging.getLogger(__name__)


def configure_logging_from_config(config: LoggingConfig, level: Optional[str] = None):
    """Configure logging from a LoggingConfig, with an optional level override"""
    return configure_logging(
        level=level or config.level,
        suppress_http=config.suppress_http,
        fmt=config.format,
        log_file=config.file
    )
