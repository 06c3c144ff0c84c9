"""
Scout Query Service — Settings Tests
======================================

Settings are built directly (not the module singleton) so each test controls
its own environment via monkeypatch.
"""

import pytest
from pydantic import ValidationError

from scout.config import Settings
from scout.schemas.query import ClientConfiguration


def test_defaults(monkeypatch):
    for var in ("LOCAL_STORE_PATH", "MCP_SERVER_URL", "MCP_API_KEY", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    s = Settings(_env_file=None)

    assert s.local_store_path == "./dev.db"
    assert s.mcp_server_url == "https://mcp-sqlite-backend.onrender.com"
    assert s.mcp_api_key == ""
    assert s.query_timeout_millis == 10_000
    assert s.query_max_retries == 3
    assert s.log_level == "INFO"


def test_environment_is_case_insensitive(monkeypatch):
    monkeypatch.delenv("MCP_SERVER_URL", raising=False)
    monkeypatch.setenv("mcp_server_url", "http://lower.test")
    monkeypatch.setenv("QUERY_MAX_RETRIES", "5")

    s = Settings(_env_file=None)

    assert s.mcp_server_url == "http://lower.test"
    assert s.query_max_retries == 5


def test_log_level_upper_cased(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_retry_window_must_be_ordered(monkeypatch):
    monkeypatch.setenv("RETRY_MIN_WAIT_MILLIS", "5000")
    monkeypatch.setenv("RETRY_MAX_WAIT_MILLIS", "100")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_zero_attempts_rejected(monkeypatch):
    monkeypatch.setenv("QUERY_MAX_RETRIES", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_api_key_hidden_from_repr(monkeypatch):
    monkeypatch.setenv("MCP_API_KEY", "super-secret")
    s = Settings(_env_file=None)
    config = ClientConfiguration.from_settings(s)

    assert "super-secret" not in repr(s)
    assert "super-secret" not in repr(config)
    assert config.api_key == "super-secret"


def test_cors_origins_list(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    assert Settings(_env_file=None).cors_origins_list == ["http://a.test", "http://b.test"]
