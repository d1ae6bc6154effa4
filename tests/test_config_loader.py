"""
tests/test_config_loader.py

Pytest unit tests for scraping configuration loading.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.scraping.config import get_scraping_settings, load_proxy_pool_config
from app.scraping.config.loader import collect_scraperapi_keys
from app.scraping.proxy_fetcher import ProxyEndpoint


@pytest.fixture()
def fresh_settings(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "SCRAPEDO_API_KEY",
        "SCRAPER_TIMEOUT_SECONDS",
        "SCRAPER_PROXY_TIMEOUT_SECONDS",
        "SCRAPER_MIN_CONTENT_LENGTH",
        "SCRAPER_CONTINUE_ON_NETWORK_ERROR",
        "SCRAPER_PROXY_CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    get_scraping_settings.cache_clear()
    yield monkeypatch
    get_scraping_settings.cache_clear()


class TestCollectScraperAPIKeys:
    def test_ordered_by_number(self) -> None:
        environ = {
            "SCRAPERAPI_KEY_10": "ten",
            "SCRAPERAPI_KEY_2": "two",
            "SCRAPERAPI_KEY_1": "one",
            "UNRELATED": "x",
        }
        assert collect_scraperapi_keys(environ) == ("one", "two", "ten")

    def test_legacy_prefix_accepted_and_overridden(self) -> None:
        environ = {
            "VITE_SCRAPERAPI_KEY_1": "legacy-one",
            "VITE_SCRAPERAPI_KEY_2": "legacy-two",
            "SCRAPERAPI_KEY_1": "one",
        }
        assert collect_scraperapi_keys(environ) == ("one", "legacy-two")

    def test_blank_values_skipped(self) -> None:
        assert collect_scraperapi_keys({"SCRAPERAPI_KEY_1": "  ", "SCRAPERAPI_KEY_2": " b "}) == ("b",)

    def test_empty_environment(self) -> None:
        assert collect_scraperapi_keys({}) == ()


class TestGetScrapingSettings:
    def test_defaults(self, fresh_settings: pytest.MonkeyPatch) -> None:
        settings = get_scraping_settings()

        assert settings.scrapedo_api_key is None
        assert settings.timeout_seconds == 60.0
        assert settings.proxy_timeout_seconds == 20.0
        assert settings.min_content_length == 5000
        assert settings.continue_on_network_error is True
        assert Path(settings.proxy_config_path).name == "proxies.json"

    def test_environment_overrides(self, fresh_settings: pytest.MonkeyPatch) -> None:
        fresh_settings.setenv("SCRAPERAPI_KEY_1", "key-one")
        fresh_settings.setenv("SCRAPEDO_API_KEY", " do-key ")
        fresh_settings.setenv("SCRAPER_TIMEOUT_SECONDS", "30")
        fresh_settings.setenv("SCRAPER_MIN_CONTENT_LENGTH", "not-a-number")
        fresh_settings.setenv("SCRAPER_CONTINUE_ON_NETWORK_ERROR", "false")

        settings = get_scraping_settings()

        assert "key-one" in settings.scraperapi_keys
        assert settings.scrapedo_api_key == "do-key"
        assert settings.timeout_seconds == 30.0
        assert settings.min_content_length == 5000
        assert settings.continue_on_network_error is False

    def test_bundled_proxy_config_loads(self, fresh_settings: pytest.MonkeyPatch) -> None:
        config = load_proxy_pool_config(config_path=get_scraping_settings().proxy_config_path)

        assert len(config.endpoints) == 11
        assert ProxyEndpoint(prefix="https://api.allorigins.win/get?url=", suffix="&callback=") in config.endpoints
        assert config.user_agents


class TestLoadProxyPoolConfig:
    def test_string_and_object_entries(self, tmp_path: Path) -> None:
        path = tmp_path / "proxies.json"
        path.write_text(
            json.dumps(
                {
                    "proxies": [
                        "https://proxy-a.test/?url=",
                        {"prefix": "https://proxy-b.test/get?url=", "suffix": "&raw=1"},
                        {"prefix": "ftp://ignored.test/"},
                        42,
                    ],
                    "user_agents": ["Agent/1.0", "", 7],
                }
            ),
            encoding="utf-8",
        )

        config = load_proxy_pool_config(config_path=str(path))

        assert config.endpoints == (
            ProxyEndpoint(prefix="https://proxy-a.test/?url="),
            ProxyEndpoint(prefix="https://proxy-b.test/get?url=", suffix="&raw=1"),
        )
        assert config.user_agents == ("Agent/1.0",)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_proxy_pool_config(config_path=str(tmp_path / "missing.json"))

    def test_proxies_must_be_list(self, tmp_path: Path) -> None:
        path = tmp_path / "proxies.json"
        path.write_text(json.dumps({"proxies": "https://proxy-a.test/"}), encoding="utf-8")

        with pytest.raises(ValueError):
            load_proxy_pool_config(config_path=str(path))
