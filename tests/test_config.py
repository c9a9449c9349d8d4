"""Tests for environment-driven configuration."""

import importlib

import pytest

import sutradhar.config as config_module
from sutradhar.sdk.transport import DEFAULT_BASE_URL

_KEYS = (
    "BOT_TOKEN", "API_BASE_URL", "HTTP_TIMEOUT", "HTTP_RETRIES", "RETRY_DELAY",
    "VERIFY_SSL", "HTTP_PROXY", "POLL_TIMEOUT", "ADMIN_IDS",
)


@pytest.fixture()
def load_config(monkeypatch):
    """Reload the config module against a controlled environment."""
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)

    def _load(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(config_module)

    yield _load
    monkeypatch.undo()
    importlib.reload(config_module)


class TestConfig:

    def test_defaults(self, load_config) -> None:
        config = load_config()
        assert config.BOT_TOKEN is None
        assert config.API_BASE_URL == DEFAULT_BASE_URL
        assert config.HTTP_TIMEOUT == 10.0
        assert config.HTTP_RETRIES == 3
        assert config.RETRY_DELAY == 1.0
        assert config.VERIFY_SSL is True
        assert config.HTTP_PROXY is None
        assert config.POLL_TIMEOUT == 30
        assert config.ADMIN_IDS == []

    def test_overrides(self, load_config) -> None:
        config = load_config(
            BOT_TOKEN="1:abc",
            API_BASE_URL="http://localhost:8081/bot",
            HTTP_TIMEOUT="2.5",
            HTTP_RETRIES="0",
            VERIFY_SSL="false",
            HTTP_PROXY="socks5://127.0.0.1:1080",
            POLL_TIMEOUT="50",
            ADMIN_IDS="755764114, 12345678",
        )
        assert config.BOT_TOKEN == "1:abc"
        assert config.API_BASE_URL == "http://localhost:8081/bot"
        assert config.HTTP_TIMEOUT == 2.5
        assert config.HTTP_RETRIES == 0
        assert config.VERIFY_SSL is False
        assert config.HTTP_PROXY == "socks5://127.0.0.1:1080"
        assert config.POLL_TIMEOUT == 50
        assert config.ADMIN_IDS == [755764114, 12345678]

    def test_invalid_values_fall_back(self, load_config) -> None:
        config = load_config(HTTP_RETRIES="many", POLL_TIMEOUT="1.5", ADMIN_IDS="1,abc,,2")
        assert config.HTTP_RETRIES == 3
        assert config.POLL_TIMEOUT == 30
        assert config.ADMIN_IDS == [1, 2]
