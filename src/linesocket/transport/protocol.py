"""
Protocol definitions for the transport collaborator.

A transport is a duplex byte stream that reports its lifecycle through
notifications. Operations subscribe to the notifications they care about and
receive a ``Subscription`` handle they release once they are done.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

READY = "ready"
DATA = "data"
TIMEOUT = "timeout"
CLOSE = "close"
ERROR = "error"

EVENTS = frozenset({READY, DATA, TIMEOUT, CLOSE, ERROR})

Listener = Callable[..., Any]
WriteCallback = Callable[[Optional[BaseException]], None]


@runtime_checkable
class Subscription(Protocol):
    """Handle for one registered listener."""

    @property
    def active(self) -> bool:
        """Whether the listener will still be called."""
        ...

    def cancel(self) -> None:
        """Stop delivering notifications to the listener.

        Cancelling an inactive subscription has no effect.
        """
        ...


@runtime_checkable
class Transport(Protocol):
    """Event-emitting duplex stream bound to one connection.

    Notifications:
        ready: the stream is connected and usable.
        data(chunk): a chunk of bytes arrived.
        timeout: the stream was idle for the configured timeout.
        close(had_error): the stream is closed.
        error(cause): the stream failed.
    """

    @property
    def destroyed(self) -> bool:
        """Whether the transport has been torn down."""
        ...

    def on(self, event: str, listener: Listener) -> Subscription:
        """Deliver every ``event`` notification to ``listener``."""
        ...

    def once(self, event: str, listener: Listener) -> Subscription:
        """Deliver the next ``event`` notification to ``listener`` only."""
        ...

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        """Cancel the subscriptions for ``event``, or for every event."""
        ...

    def set_timeout(self, timeout: float) -> None:
        """Set the idle timeout in seconds; ``0`` disables it."""
        ...

    def write(self, data: bytes, callback: WriteCallback) -> None:
        """Queue ``data`` and report completion through ``callback``.

        The callback receives ``None`` on success or the failure cause.
        """
        ...

    def destroy(self) -> None:
        """Tear the stream down immediately. Idempotent."""
        ...


@runtime_checkable
class TransportFactory(Protocol):
    """Creates transports connecting to a host and port."""

    def create_transport(self, host: str, port: int) -> Transport:
        """Create a transport and start connecting it.

        Connection progress is reported through the transport's ``ready`` and
        ``error`` notifications, never before the caller regains control.
        """
        ...
