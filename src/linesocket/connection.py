"""
Connection factory and handle.

``open_connection`` creates a transport, arms its idle timeout and waits for it
to become ready. The returned ``Connection`` runs one adapter cycle per
``write`` or ``recv`` call. At most one operation may be outstanding on a
connection at a time.
"""

from dataclasses import asdict
from functools import partial
from types import TracebackType
from typing import Any, Dict, Mapping, Optional, Type, Union

from linesocket import adapter
from linesocket.adapter import AssemblerFactory, MessageAssembler
from linesocket.config import ConnectionConfig
from linesocket.errors import (
    ERROR_ON_READ,
    ERROR_ON_WRITE,
    ConfigurationError,
    SocketError,
    classify_close,
)
from linesocket.telemetry import get_telemetry
from linesocket.transport.protocol import Transport, TransportFactory
from linesocket.transport.registry import get_transport_factory_registry

LOGGER_NAME = "linesocket.connection"


class Connection:
    """
    A ready connection to a remote host, exchanging delimited text messages.

    Connections are created by ``open_connection``; they own their transport
    exclusively and release it on ``close()`` or when leaving an
    ``async with`` block.
    """

    def __init__(
        self,
        transport: Transport,
        config: ConnectionConfig,
        assembler_factory: Optional[AssemblerFactory] = None,
        enable_telemetry: bool = True,
    ):
        """Initialize the connection.

        Args:
            transport: A transport that has already reported ``ready``.
            config: The settings the transport was opened with.
            assembler_factory: Builds the data handler for each ``recv``;
                defaults to a ``MessageAssembler`` using the configured
                delimiter and encoding.
            enable_telemetry: Whether to log and trace operations.
        """
        self._transport = transport
        self._config = config
        self._assembler_factory = assembler_factory or partial(
            MessageAssembler, delimiter=config.delimiter, encoding=config.encoding
        )
        self._tracer, self._logger = get_telemetry(LOGGER_NAME, enabled=enable_telemetry)

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def closed(self) -> bool:
        return self._transport.destroyed

    def _peer(self) -> Dict[str, Any]:
        return {"host": self._config.host, "port": self._config.port}

    def _span_attributes(self) -> Dict[str, Any]:
        return {"net.peer.name": self._config.host, "net.peer.port": self._config.port}

    def _ensure_open(self, message: str) -> None:
        # a destroyed transport never emits again, so waiting would hang
        if self._transport.destroyed:
            raise classify_close(False, message)

    async def write(self, message: Union[str, bytes, bytearray, memoryview]) -> None:
        """Send a message to the remote host.

        Args:
            message: Text (encoded with the configured encoding) or a
                bytes-like object. Nothing is appended; include the
                delimiter if the peer expects one.

        Raises:
            TypeError: If ``message`` is neither text nor bytes-like.
            TransmissionError: If the data could not be sent, or the
                connection closed with an error before it was.
            ConnectionClosedError: If the connection closed first.
        """
        if isinstance(message, str):
            data = message.encode(self._config.encoding)
        elif isinstance(message, (bytes, bytearray, memoryview)):
            data = bytes(message)
        else:
            raise TypeError(f"message must be str or bytes-like, not {type(message).__name__}")

        with self._tracer.start_as_current_span("linesocket.write", self._span_attributes()) as span:
            span.set_attribute("message.size", len(data))
            try:
                self._ensure_open(ERROR_ON_WRITE)
                await adapter.send(self._transport, data)
            except SocketError as e:
                span.set_attribute("error.kind", e.kind.value)
                self._logger.error(
                    "message.send_failed",
                    kind=e.kind.value,
                    error=str(e),
                    cause=repr(e.cause),
                    **self._peer(),
                )
                raise

        self._logger.debug("message.sent", size=len(data), **self._peer())

    async def recv(self) -> str:
        """Wait for one complete message from the remote host.

        The idle timer is re-armed when the receive starts, so a pending
        ``recv`` times out after ``idle_timeout`` seconds without data even
        if the connection was already idle before the call.

        Returns:
            The message, including its trailing delimiter.

        Raises:
            SocketTimeoutError: If the idle timeout elapsed first.
            TransmissionError: If the connection closed with an error.
            ConnectionClosedError: If the connection closed cleanly.
        """
        with self._tracer.start_as_current_span("linesocket.recv", self._span_attributes()) as span:
            try:
                self._ensure_open(ERROR_ON_READ)
                self._transport.set_timeout(self._config.idle_timeout)
                message = await adapter.receive(self._transport, self._assembler_factory)
            except SocketError as e:
                span.set_attribute("error.kind", e.kind.value)
                self._logger.error(
                    "message.receive_failed",
                    kind=e.kind.value,
                    error=str(e),
                    cause=repr(e.cause),
                    **self._peer(),
                )
                raise
            span.set_attribute("message.size", len(message))

        self._logger.debug("message.received", size=len(message), **self._peer())
        return message

    def close(self) -> None:
        """Tear the transport down immediately.

        A pending ``write`` or ``recv`` fails with ``ConnectionClosedError``
        once the transport reports the close. Closing again is harmless.
        """
        if not self._transport.destroyed:
            self._logger.info("connection.close", **self._peer())
        self._transport.destroy()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Connection {self._config.host}:{self._config.port} {state}>"


def _resolve_factory(transport_type: str) -> TransportFactory:
    registry = get_transport_factory_registry()
    try:
        return registry.get(transport_type)
    except KeyError:
        raise ConfigurationError(
            f"Invalid transport type: {transport_type}. "
            f"Available types: {', '.join(registry.get_registered_names())}"
        ) from None


async def open_connection(
    host: Optional[str] = None,
    port: Optional[int] = None,
    idle_timeout: Optional[float] = None,
    *,
    config: Union[ConnectionConfig, Mapping[str, Any], None] = None,
    transport_type: str = "tcp",
    transport_factory: Optional[TransportFactory] = None,
    assembler_factory: Optional[AssemblerFactory] = None,
    enable_telemetry: bool = True,
) -> Connection:
    """Open a connection and wait until it is ready.

    Args:
        host: Remote host; falls back to ``config``, ``LINESOCKET_HOST`` and
            then ``localhost``.
        port: Remote port; falls back to ``config`` and ``LINESOCKET_PORT``.
        idle_timeout: Seconds of inactivity after which a pending ``recv``
            fails; ``0`` (the default) disables it.
        config: A ``ConnectionConfig`` or a mapping of the same keys.
        transport_type: Name of a registered transport factory.
        transport_factory: Factory to use instead of the registry lookup.
        assembler_factory: Custom message assembly, see ``Connection``.
        enable_telemetry: Whether to log and trace this connection.

    Returns:
        A ready connection.

    Raises:
        ConfigurationError: If the settings are missing or invalid.
        ConnectionRefusedError: If the transport failed before it was ready.
    """
    if isinstance(config, ConnectionConfig):
        config = asdict(config)
    settings = ConnectionConfig.resolve(config, host=host, port=port, idle_timeout=idle_timeout)

    if transport_factory is None:
        transport_factory = _resolve_factory(transport_type)

    tracer, logger = get_telemetry(LOGGER_NAME, enabled=enable_telemetry)
    attributes = {"net.peer.name": settings.host, "net.peer.port": settings.port}

    with tracer.start_as_current_span("linesocket.connect", attributes) as span:
        transport = transport_factory.create_transport(settings.host, settings.port)
        transport.set_timeout(settings.idle_timeout)

        ready = False
        try:
            await adapter.await_ready(transport)
            ready = True
        except SocketError as e:
            span.set_attribute("error.kind", e.kind.value)
            logger.error(
                "connection.refused",
                host=settings.host,
                port=settings.port,
                error=str(e),
                cause=repr(e.cause),
            )
            raise
        finally:
            # nobody else holds the transport if no handle is returned
            if not ready:
                transport.destroy()

    logger.info(
        "connection.open",
        host=settings.host,
        port=settings.port,
        idle_timeout=settings.idle_timeout,
    )
    return Connection(transport, settings, assembler_factory, enable_telemetry)
