"""
Tests for configuration resolution.
"""

import os

import pytest

from linesocket.config import (
    ConnectionConfig,
    get_env_config,
    merge_configs,
)
from linesocket.errors import ConfigurationError

pytestmark = pytest.mark.usefixtures("clean_env")


def test_defaults():
    """Test the defaults applied when only a port is given."""
    config = ConnectionConfig.resolve(port=25)
    assert config.host == "localhost"
    assert config.port == 25
    assert config.idle_timeout == 0
    assert config.delimiter == os.linesep
    assert config.encoding == "utf-8"


def test_get_env_config(monkeypatch):
    """Test reading LINESOCKET_* variables."""
    assert get_env_config("idle_timeout") is None
    monkeypatch.setenv("LINESOCKET_IDLE_TIMEOUT", "4.5")
    assert get_env_config("idle_timeout") == "4.5"


def test_merge_configs():
    """Test that later mappings win and None values are skipped."""
    merged = merge_configs({"host": "a", "port": 1}, None, {"host": None, "port": 2})
    assert merged == {"host": "a", "port": 2}


def test_resolution_order(monkeypatch):
    """Test argument > mapping > environment > default precedence."""
    monkeypatch.setenv("LINESOCKET_HOST", "env.example")
    monkeypatch.setenv("LINESOCKET_PORT", "7000")
    monkeypatch.setenv("LINESOCKET_IDLE_TIMEOUT", "3")

    config = ConnectionConfig.resolve()
    assert (config.host, config.port, config.idle_timeout) == ("env.example", 7000, 3.0)

    config = ConnectionConfig.resolve({"host": "mapping.example", "port": 7001})
    assert (config.host, config.port) == ("mapping.example", 7001)

    config = ConnectionConfig.resolve({"host": "mapping.example"}, host="arg.example", port=1)
    assert (config.host, config.port, config.idle_timeout) == ("arg.example", 1, 3.0)


def test_missing_port():
    """Test that a port is required."""
    with pytest.raises(ConfigurationError, match="port is required"):
        ConnectionConfig.resolve(host="localhost")


@pytest.mark.parametrize(
    "values",
    [
        {"port": 70000},
        {"port": "not-a-port"},
        {"port": 25, "idle_timeout": -1},
        {"port": 25, "idle_timeout": "soon"},
        {"port": 25, "delimiter": ""},
        {"port": 25, "encoding": "no-such-codec"},
        {"port": 25, "encoding": "hex"},
        {"port": 25, "encoding": "base64"},
        {"port": 25, "encoding": "rot13"},
        {"port": 25.9},
        {"port": 25, "host": ""},
        {"port": 25, "retries": 3},
    ],
)
def test_invalid_values(values):
    """Test that invalid settings raise ConfigurationError."""
    with pytest.raises(ConfigurationError):
        ConnectionConfig.resolve(values)


def test_non_text_encoding_rejected_directly():
    """Test that a bytes-to-bytes codec is rejected on construction."""
    with pytest.raises(ConfigurationError, match="Not a text encoding"):
        ConnectionConfig(host="localhost", port=25, encoding="hex")


def test_whole_number_port_accepted():
    """Test that integral port values from any source are accepted."""
    assert ConnectionConfig.resolve(port=25.0).port == 25
    assert ConnectionConfig.resolve({"port": "25"}).port == 25


def test_config_is_frozen():
    """Test that a resolved configuration cannot be modified."""
    config = ConnectionConfig(host="localhost", port=25)
    with pytest.raises(AttributeError):
        config.port = 26
