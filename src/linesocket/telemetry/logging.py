"""
Logging implementations for the telemetry module.
"""

from typing import Any


class NoOpLogger:
    """No-op implementation of a logger."""

    def __init__(self, name: str = ""):
        self.name = name

    def debug(self, event: str, **kwargs: Any) -> None:
        pass

    def info(self, event: str, **kwargs: Any) -> None:
        pass

    def warning(self, event: str, **kwargs: Any) -> None:
        pass

    def error(self, event: str, **kwargs: Any) -> None:
        pass

    def critical(self, event: str, **kwargs: Any) -> None:
        pass
