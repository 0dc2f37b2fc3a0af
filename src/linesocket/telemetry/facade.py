"""
Facades over OpenTelemetry tracing and structlog logging.
"""

from typing import Any, Dict, Optional

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from linesocket.telemetry.logging import NoOpLogger
from linesocket.telemetry.tracing import NoOpSpan


class TracingFacade:
    """Tracer wrapper that hands out no-op spans when disabled."""

    def __init__(self, name: str, enabled: bool = True):
        """
        Initialize a new tracing facade.

        Args:
            name: The name of the tracer
            enabled: Whether spans should be recorded
        """
        self.name = name
        self.tracer = trace.get_tracer(name) if enabled else None

    def start_span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        """
        Start a new span.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span

        Returns:
            A span, or a NoOpSpan when tracing is disabled
        """
        if self.tracer is None:
            return NoOpSpan(name, attributes)
        return self.tracer.start_span(name, attributes=attributes)

    def start_as_current_span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        """
        Start a new span and make it the current span.

        Returns:
            A context manager yielding the span
        """
        if self.tracer is None:
            return NoOpSpan(name, attributes)
        return self.tracer.start_as_current_span(name, attributes=attributes)


class LoggingFacade:
    """structlog wrapper that adds the current trace context to every event."""

    def __init__(self, name: str, enabled: bool = True):
        """
        Initialize a new logging facade.

        Args:
            name: The name of the logger
            enabled: Whether events should be logged
        """
        self.name = name
        self.enabled = enabled
        self.logger = structlog.get_logger(name) if enabled else NoOpLogger(name)

    def _add_trace_context(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        if not self.enabled:
            return kwargs
        span = trace.get_current_span()
        context = span.get_span_context() if span else None
        if context is not None and getattr(context, "is_valid", False):
            kwargs["trace_id"] = format(context.trace_id, "032x")
            kwargs["span_id"] = format(context.span_id, "016x")
        return kwargs

    def _mark_span_error(self, event: str) -> None:
        if not self.enabled:
            return
        span = trace.get_current_span()
        if span:
            span.set_status(Status(StatusCode.ERROR, event))

    def debug(self, event: str, **kwargs: Any) -> None:
        self.logger.debug(event, **self._add_trace_context(kwargs))

    def info(self, event: str, **kwargs: Any) -> None:
        self.logger.info(event, **self._add_trace_context(kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(event, **self._add_trace_context(kwargs))

    def error(self, event: str, **kwargs: Any) -> None:
        self._mark_span_error(event)
        self.logger.error(event, **self._add_trace_context(kwargs))

    def critical(self, event: str, **kwargs: Any) -> None:
        self._mark_span_error(event)
        self.logger.critical(event, **self._add_trace_context(kwargs))
