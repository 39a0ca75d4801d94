# poemfinder/config/config_manager.py

import os
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from poemfinder.data.query_builder import DEFAULT_BASE_URL

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class ApiConfig:
    """PoetryDB connection configuration"""
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30
    user_agent: Optional[str] = None


@dataclass
class SearchConfig:
    """Retrieval defaults"""
    debounce_ms: int = 250
    random_count: int = 1
    pool_size: int = 150
    top_k: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = DEFAULT_LOG_FORMAT
    file: Optional[str] = None
    suppress_http: bool = True


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if number < 1:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


class ConfigManager:
    """
    Manages configuration loading and access for poemfinder.

    Handles loading from YAML files, environment variable overrides,
    and provides typed access to configuration sections.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else self._get_default_config_path()
        self.logger = logging.getLogger(__name__)

        self._config: Dict[str, Any] = {}
        self._load_config()

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path"""
        current_dir = Path(__file__).parent
        return current_dir / "default_config.yaml"

    def _load_config(self):
        """Load configuration from YAML file"""
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                self.logger.error(f"Configuration root must be a mapping: {self.config_path}")
                loaded = {}
            self._config = loaded
            self.logger.info(f"Loaded configuration from {self.config_path}")

        except FileNotFoundError:
            self.logger.warning(f"Configuration file not found: {self.config_path}")
            self._config = {}
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing configuration file: {e}")
            self._config = {}

        # Apply environment variable overrides
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply environment variable overrides"""
        if os.getenv("POEMFINDER_BASE_URL"):
            self._config.setdefault("api", {})["base_url"] = os.getenv("POEMFINDER_BASE_URL")

        if os.getenv("POEMFINDER_TIMEOUT"):
            self._config.setdefault("api", {})["timeout"] = os.getenv("POEMFINDER_TIMEOUT")

        if os.getenv("POEMFINDER_DEBOUNCE_MS"):
            self._config.setdefault("search", {})["debounce_ms"] = os.getenv("POEMFINDER_DEBOUNCE_MS")

        if os.getenv("POEMFINDER_LOG_LEVEL"):
            self._config.setdefault("logging", {})["level"] = os.getenv("POEMFINDER_LOG_LEVEL")

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._config.get(name) or {}
        if not isinstance(section, dict):
            self.logger.warning(f"Ignoring non-mapping configuration section: {name}")
            return {}
        return section

    def get_api_config(self) -> ApiConfig:
        """Get PoetryDB connection configuration"""
        api_config = self._section("api")

        timeout = float(api_config.get("timeout", 30))
        if timeout <= 0:
            raise ValueError(f"api.timeout must be positive, got {timeout}")

        return ApiConfig(
            base_url=str(api_config.get("base_url") or DEFAULT_BASE_URL).rstrip('/'),
            timeout=timeout,
            user_agent=api_config.get("user_agent")
        )

    def get_search_config(self) -> SearchConfig:
        """Get retrieval defaults"""
        search_config = self._section("search")

        debounce_ms = int(search_config.get("debounce_ms", 250))
        if debounce_ms < 0:
            raise ValueError(f"search.debounce_ms must be non-negative, got {debounce_ms}")

        return SearchConfig(
            debounce_ms=debounce_ms,
            random_count=_positive_int(search_config.get("random_count", 1), "search.random_count"),
            pool_size=_positive_int(search_config.get("pool_size", 150), "search.pool_size"),
            top_k=_positive_int(search_config.get("top_k", 10), "search.top_k")
        )

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration"""
        log_config = self._section("logging")

        return LoggingConfig(
            level=str(log_config.get("level", "INFO")).upper(),
            format=log_config.get("format", DEFAULT_LOG_FORMAT),
            file=log_config.get("file"),
            suppress_http=bool(log_config.get("suppress_http", True))
        )

    def get_client_config(self) -> Dict[str, Any]:
        """Configuration dictionary for PoetryClientFactory"""
        api = self.get_api_config()
        return {
            'base_url': api.base_url,
            'timeout': api.timeout,
            'user_agent': api.user_agent
        }

    def get_raw_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary"""
        return self._config.copy()

    def reload_config(self):
        """Reload configuration from file"""
        self._load_config()


# Singleton instance for global access
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[str] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager

    if _config_manager is None or config_path is not None:
        _config_manager = ConfigManager(config_path)

    return _config_manager
