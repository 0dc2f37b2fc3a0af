"""
Tracing implementations for the telemetry module.
"""

from typing import Any, Dict, Optional


class NoOpSpan:
    """No-op implementation of a span."""

    def __init__(self, name: str = "", attributes: Optional[Dict[str, Any]] = None):
        """
        Initialize a new no-op span.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span
        """
        self.name = name
        self.attributes = attributes or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def add_event(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        pass

    def record_exception(self, exception: BaseException) -> None:
        pass

    def set_status(self, status) -> None:
        pass
