"""
Configuration handling for linesocket.

Each setting is resolved from, in order: an explicit argument, a
configuration mapping, a ``LINESOCKET_<KEY>`` environment variable and
finally the built-in default.
"""

import codecs
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from linesocket.errors import ConfigurationError

ENV_PREFIX = "LINESOCKET_"

NO_IDLE_TIMEOUT = 0.0

CONFIG_KEYS = ("host", "port", "idle_timeout", "delimiter", "encoding")

DEFAULTS: Dict[str, Any] = {
    "host": "localhost",
    "idle_timeout": NO_IDLE_TIMEOUT,
    "delimiter": os.linesep,
    "encoding": "utf-8",
}


def get_env_config(key: str) -> Optional[str]:
    """Get a configuration value from the environment.

    Args:
        key: The configuration key, e.g. ``"idle_timeout"``.

    Returns:
        The raw string value of ``LINESOCKET_IDLE_TIMEOUT``, or None.
    """
    return os.environ.get(f"{ENV_PREFIX}{key.upper()}")


def merge_configs(*configs: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge configuration mappings; later mappings win, None values are skipped."""
    merged: Dict[str, Any] = {}
    for config in configs:
        if not config:
            continue
        merged.update({key: value for key, value in config.items() if value is not None})
    return merged


def _to_port(value: Any) -> int:
    """Convert a port setting to an int without truncating fractions."""
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"port must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class ConnectionConfig:
    """Validated settings for one connection.

    Attributes:
        host: Remote host name or address.
        port: Remote TCP port.
        idle_timeout: Seconds of inactivity before a pending receive times
            out; ``0`` disables the timeout.
        delimiter: Trailing text that marks the end of a message.
        encoding: Codec used to encode written text and decode received data.
    """

    host: str
    port: int
    idle_timeout: float = NO_IDLE_TIMEOUT
    delimiter: str = DEFAULTS["delimiter"]
    encoding: str = "utf-8"

    def __post_init__(self):
        if not self.host:
            raise ConfigurationError("A host is required")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Invalid port: {self.port!r}")
        if self.idle_timeout < 0:
            raise ConfigurationError(f"Idle timeout must be non-negative, got {self.idle_timeout}")
        if not self.delimiter:
            raise ConfigurationError("Message delimiter must not be empty")
        try:
            codec = codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigurationError(f"Unknown encoding: {self.encoding}") from e
        # bytes-to-bytes codecs such as "hex" or "base64" cannot encode text
        if not getattr(codec, "_is_text_encoding", True):
            raise ConfigurationError(f"Not a text encoding: {self.encoding}")

    @classmethod
    def resolve(
        cls, config: Optional[Mapping[str, Any]] = None, **overrides: Any
    ) -> "ConnectionConfig":
        """Build a configuration from every source.

        Args:
            config: Optional configuration mapping.
            **overrides: Explicit values; None means "not given".

        Raises:
            ConfigurationError: If a value is missing or invalid.
        """
        env = {key: get_env_config(key) for key in CONFIG_KEYS}
        values = merge_configs(DEFAULTS, env, config, overrides)

        unknown = set(values) - set(CONFIG_KEYS)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
        if "port" not in values:
            raise ConfigurationError(
                f"A port is required (pass port= or set {ENV_PREFIX}PORT)"
            )

        try:
            port = _to_port(values["port"])
            idle_timeout = float(values["idle_timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

        return cls(
            host=str(values["host"]),
            port=port,
            idle_timeout=idle_timeout,
            delimiter=str(values["delimiter"]),
            encoding=str(values["encoding"]),
        )
