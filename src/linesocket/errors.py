"""
Error hierarchy and classifier for linesocket.

Every failure of a connection operation surfaces as exactly one of four
``SocketError`` subclasses. The classifier maps raw transport conditions onto
that taxonomy and is only used internally by the operation adapter.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type

ERROR_ON_READ = "Error while awaiting message from remote host"
ERROR_ON_WRITE = "Error while sending message to remote host"
IDLE_TIMEOUT_ERROR = "Connection timed out while awaiting message from remote host"


class LinesocketError(Exception):
    """Base class for all linesocket errors."""


class ConfigurationError(LinesocketError):
    """Error raised when a connection is configured with invalid values."""


class SocketErrorType(str, Enum):
    """The closed set of operation failure kinds."""

    TIMEOUT = "TIMEOUT"
    CONNECTION_CLOSED = "CONNECTION_CLOSED"
    CONNECTION_REFUSED = "CONNECTION_REFUSED"
    TRANSMISSION_ERROR = "TRANSMISSION_ERROR"


class SocketError(LinesocketError):
    """A classified connection failure.

    Concrete failures are raised as one of the four subclasses below, each of
    which fixes ``kind``; the base class itself has no kind.

    Attributes:
        kind: The failure kind, None on the base class.
        cause: The original lower-level cause, either an exception or the
            ``had_error`` flag of a close notification.
    """

    kind: Optional[SocketErrorType] = None

    def __init__(self, message: str, cause: Any = None):
        super().__init__(message)
        self.cause = cause
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __repr__(self) -> str:
        kind = self.kind.value if self.kind is not None else None
        return f"{type(self).__name__}({str(self)!r}, kind={kind}, cause={self.cause!r})"


class SocketTimeoutError(SocketError):
    """The transport was idle for longer than its idle timeout."""

    kind = SocketErrorType.TIMEOUT


class ConnectionClosedError(SocketError):
    """The transport closed cleanly while an operation was pending."""

    kind = SocketErrorType.CONNECTION_CLOSED


class ConnectionRefusedError(SocketError):
    """The transport failed before it became ready."""

    kind = SocketErrorType.CONNECTION_REFUSED


class TransmissionError(SocketError):
    """Data could not be transmitted, or the transport closed with an error."""

    kind = SocketErrorType.TRANSMISSION_ERROR


class Condition(Enum):
    """Raw transport conditions the classifier understands."""

    CONNECT_ERROR = "connect_error"
    IDLE_TIMEOUT = "idle_timeout"
    CLOSED_WITH_ERROR = "closed_with_error"
    CLOSED = "closed"
    WRITE_FAILED = "write_failed"


_CLASSIFICATION: Dict[Condition, Type[SocketError]] = {
    Condition.CONNECT_ERROR: ConnectionRefusedError,
    Condition.IDLE_TIMEOUT: SocketTimeoutError,
    Condition.CLOSED_WITH_ERROR: TransmissionError,
    Condition.CLOSED: ConnectionClosedError,
    Condition.WRITE_FAILED: TransmissionError,
}

_DEFAULT_MESSAGES: Dict[Condition, str] = {
    Condition.IDLE_TIMEOUT: IDLE_TIMEOUT_ERROR,
    Condition.CLOSED_WITH_ERROR: ERROR_ON_READ,
    Condition.CLOSED: ERROR_ON_READ,
    Condition.WRITE_FAILED: ERROR_ON_WRITE,
}


def classify(
    condition: Condition, cause: Any = None, message: Optional[str] = None
) -> SocketError:
    """Map a raw transport condition to a classified error.

    Args:
        condition: The condition observed on the transport.
        cause: The original cause to wrap.
        message: Optional message overriding the condition's default.

    Returns:
        The classified error, ready to be raised.
    """
    error_class = _CLASSIFICATION[condition]
    if message is None:
        message = _DEFAULT_MESSAGES.get(condition) or str(cause)
    return error_class(message, cause)


def classify_close(had_error: bool, message: Optional[str] = None) -> SocketError:
    """Classify a close notification by its ``had_error`` flag."""
    condition = Condition.CLOSED_WITH_ERROR if had_error else Condition.CLOSED
    return classify(condition, bool(had_error), message)
