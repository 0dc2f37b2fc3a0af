"""
Telemetry module for linesocket.

Structured logging goes through structlog and tracing through OpenTelemetry.
Both can be switched off per connection, in which case no-op implementations
are handed out instead.
"""

from linesocket.telemetry.config import configure_telemetry
from linesocket.telemetry.facade import LoggingFacade, TracingFacade


def get_telemetry(name: str, enabled: bool = True) -> tuple:
    """
    Get tracer and logger instances for the given name.

    Args:
        name: The name to use for the tracer and logger
        enabled: Whether to emit telemetry at all

    Returns:
        A tuple containing a tracer and logger
    """
    return TracingFacade(name, enabled=enabled), LoggingFacade(name, enabled=enabled)


__all__ = ["get_telemetry", "configure_telemetry", "TracingFacade", "LoggingFacade"]
