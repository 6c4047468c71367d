import json

import pytest
import structlog
from pydantic import ValidationError

from ssdb_zset.config import Settings, get_settings
from ssdb_zset.core.logging import setup_logging

def test_defaults(monkeypatch):
    for name in ("SSDB_HOST", "SSDB_PORT", "SSDB_TIMEOUT", "SSDB_AUTH", "SSDB_STRICT_SCORES"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.host == "127.0.0.1"
    assert settings.port == 8888
    assert settings.strict_scores is True
    assert settings.auth is None

def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SSDB_HOST", "ssdb.internal")
    monkeypatch.setenv("SSDB_PORT", "9999")
    monkeypatch.setenv("SSDB_STRICT_SCORES", "false")

    settings = Settings(_env_file=None)

    assert settings.host == "ssdb.internal"
    assert settings.port == 9999
    assert settings.strict_scores is False

def test_invalid_port_rejected(monkeypatch):
    monkeypatch.setenv("SSDB_PORT", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)

def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()

def test_setup_logging_emits_json(capsys):
    setup_logging("INFO")
    try:
        structlog.get_logger().info("zset_command", command="zget")
        structlog.get_logger().debug("dropped_below_level")

        lines = [line for line in capsys.readouterr().out.splitlines() if line]
        record = json.loads(lines[-1])

        assert record["event"] == "zset_command"
        assert record["command"] == "zget"
        assert record["level"] == "info"
        assert "timestamp" in record
        assert not any("dropped_below_level" in line for line in lines)
    finally:
        structlog.reset_defaults()
