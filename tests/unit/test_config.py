"""
Unit tests for ServerConfig.
"""

import pytest

from cannedhttp.config import ServerConfig, DEFAULT_ROUTES


class TestDefaults:

    def test_defaults_are_valid(self):
        config = ServerConfig()
        config.validate()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.timeout is None
        assert config.max_sessions is None
        assert config.server_name == "cannedhttp/1.0"

    def test_default_routes(self):
        assert [path for path, _ in DEFAULT_ROUTES] == ["/", "/test", "/foo"]
        assert dict(DEFAULT_ROUTES)["/test"] == "Hello World"


class TestValidate:

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 0},
        {"max_request_size": 0},
        {"timeout": 0},
        {"timeout": -2.5},
        {"max_sessions": 0},
        {"log_level": "LOUD"},
    ])
    def test_rejects(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": 0},
        {"port": 65535},
        {"timeout": 0.5},
        {"max_sessions": 1},
        {"log_level": "debug"},
    ])
    def test_accepts(self, overrides):
        ServerConfig(**overrides).validate()


class TestFromEnv:

    def test_unset_uses_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_TIMEOUT",
                     "HTTP_MAX_SESSIONS", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("HTTP_HOST", "::1")
        monkeypatch.setenv("HTTP_PORT", "9090")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_MAX_SESSIONS", "16")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "::1"
        assert config.port == 9090
        assert config.timeout == 2.5
        assert config.max_sessions == 16
        assert config.log_level == "DEBUG"

    def test_empty_optional_means_unset(self, monkeypatch):
        monkeypatch.setenv("HTTP_TIMEOUT", "")
        monkeypatch.setenv("HTTP_MAX_SESSIONS", "")

        config = ServerConfig.from_env()

        assert config.timeout is None
        assert config.max_sessions is None

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "eighty")
        with pytest.raises(ValueError):
            ServerConfig.from_env()
