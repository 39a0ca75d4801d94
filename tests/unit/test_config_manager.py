# tests/unit/test_config_manager.py

import pytest
from poemfinder.config.config_manager import (
    ConfigManager,
    ApiConfig,
    SearchConfig,
    LoggingConfig,
    get_config_manager
)

ENV_VARS = ["POEMFINDER_BASE_URL", "POEMFINDER_TIMEOUT", "POEMFINDER_DEBOUNCE_MS",
            "POEMFINDER_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestConfigManager:
    """Test configuration loading"""

    def test_packaged_defaults(self):
        manager = ConfigManager()

        assert manager.get_api_config() == ApiConfig(base_url="https://poetrydb.org", timeout=30.0,
                                                     user_agent="poemfinder/1.0")
        assert manager.get_search_config() == SearchConfig()
        assert manager.get_logging_config().level == "INFO"

    def test_load_from_file(self, tmp_path):
        path = write_config(tmp_path, """
api:
  base_url: http://localhost:3000/
  timeout: 5
search:
  debounce_ms: 100
  pool_size: 40
  top_k: 3
logging:
  level: debug
  file: poemfinder.log
""")
        manager = ConfigManager(path)

        api = manager.get_api_config()
        assert api.base_url == "http://localhost:3000"
        assert api.timeout == 5.0

        search = manager.get_search_config()
        assert search.debounce_ms == 100
        assert search.random_count == 1
        assert search.pool_size == 40
        assert search.top_k == 3

        logging_config = manager.get_logging_config()
        assert logging_config.level == "DEBUG"
        assert logging_config.file == "poemfinder.log"
        assert logging_config.suppress_http is True

    def test_missing_file_uses_defaults(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "missing.yaml"))

        assert manager.get_raw_config() == {}
        assert manager.get_api_config().base_url == "https://poetrydb.org"
        assert manager.get_logging_config() == LoggingConfig()

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        manager = ConfigManager(write_config(tmp_path, "api: [unclosed"))
        assert manager.get_raw_config() == {}

    def test_non_mapping_root_and_sections(self, tmp_path):
        assert ConfigManager(write_config(tmp_path, "- a\n- b\n")).get_raw_config() == {}

        manager = ConfigManager(write_config(tmp_path, "search: 12\n"))
        assert manager.get_search_config() == SearchConfig()

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("POEMFINDER_BASE_URL", "http://mirror.local")
        monkeypatch.setenv("POEMFINDER_TIMEOUT", "2.5")
        monkeypatch.setenv("POEMFINDER_DEBOUNCE_MS", "0")
        monkeypatch.setenv("POEMFINDER_LOG_LEVEL", "warning")

        manager = ConfigManager(write_config(tmp_path, "api:\n  base_url: http://ignored\n"))

        assert manager.get_api_config().base_url == "http://mirror.local"
        assert manager.get_api_config().timeout == 2.5
        assert manager.get_search_config().debounce_ms == 0
        assert manager.get_logging_config().level == "WARNING"

    @pytest.mark.parametrize("text, getter", [
        ("api:\n  timeout: 0\n", "get_api_config"),
        ("search:\n  debounce_ms: -1\n", "get_search_config"),
        ("search:\n  pool_size: 0\n", "get_search_config"),
        ("search:\n  top_k: many\n", "get_search_config"),
    ])
    def test_invalid_values(self, tmp_path, text, getter):
        manager = ConfigManager(write_config(tmp_path, text))

        with pytest.raises(ValueError):
            getattr(manager, getter)()

    def test_client_config(self, tmp_path):
        manager = ConfigManager(write_config(tmp_path, "api:\n  timeout: 9\n"))

        assert manager.get_client_config() == {
            'base_url': "https://poetrydb.org",
            'timeout': 9.0,
            'user_agent': None
        }

    def test_reload_picks_up_changes(self, tmp_path):
        path = write_config(tmp_path, "search:\n  top_k: 2\n")
        manager = ConfigManager(path)
        assert manager.get_search_config().top_k == 2

        write_config(tmp_path, "search:\n  top_k: 7\n")
        manager.reload_config()

        assert manager.get_search_config().top_k == 7

    def test_get_config_manager_singleton(self, tmp_path):
        path = write_config(tmp_path, "search:\n  top_k: 4\n")

        first = get_config_manager(path)
        assert get_config_manager() is first
        assert get_config_manager().get_search_config().top_k == 4
