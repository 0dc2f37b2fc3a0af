"""
linesocket: awaitable line-oriented messaging over raw TCP streams.
"""

from linesocket.adapter import MessageAssembler
from linesocket.config import ConnectionConfig
from linesocket.connection import Connection, open_connection
from linesocket.errors import (
    ConfigurationError,
    ConnectionClosedError,
    ConnectionRefusedError,
    LinesocketError,
    SocketError,
    SocketErrorType,
    SocketTimeoutError,
    TransmissionError,
)
from linesocket.telemetry import configure_telemetry

__version__ = "0.1.0"

__all__ = [
    "open_connection",
    "Connection",
    "ConnectionConfig",
    "MessageAssembler",
    "LinesocketError",
    "ConfigurationError",
    "SocketError",
    "SocketErrorType",
    "SocketTimeoutError",
    "ConnectionClosedError",
    "ConnectionRefusedError",
    "TransmissionError",
    "configure_telemetry",
]
