"""
TCP transport built on asyncio's protocol callbacks.

The transport starts connecting as soon as it is created and reports progress
through its notifications. It owns the connector task and the idle timer; no
other background work is started.
"""

import asyncio
import errno
from collections import deque
from typing import Any, Deque, Dict, Optional

from linesocket.transport.events import EventEmitter
from linesocket.transport.protocol import (
    CLOSE,
    DATA,
    ERROR,
    READY,
    TIMEOUT,
    WriteCallback,
)


class TCPTransport(EventEmitter, asyncio.Protocol):
    """Event-emitting TCP stream.

    Notifications are emitted from the event loop thread, one at a time:
    ``ready`` once connected, ``data`` per received chunk, ``timeout`` after
    ``timeout`` idle seconds, ``error`` when the stream fails and ``close``
    exactly once when it is gone.
    """

    def __init__(
        self,
        host: str,
        port: int,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        **connect_options: Any,
    ):
        EventEmitter.__init__(self)
        self.host = host
        self.port = port
        self._loop = loop or asyncio.get_running_loop()
        self._connect_options = connect_options
        self._stream: Optional[asyncio.Transport] = None
        self._timeout = 0.0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._paused = False
        self._pending_writes: Deque[WriteCallback] = deque()
        self._destroyed = False
        self._closed = False
        self._connector = self._loop.create_task(self._connect())

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def timeout(self) -> float:
        return self._timeout

    async def _connect(self) -> None:
        try:
            await self._loop.create_connection(
                lambda: self, self.host, self.port, **self._connect_options
            )
        except Exception as exc:
            if not self._destroyed:
                self._destroyed = True
                self._cancel_timer()
                self.emit(ERROR, exc)
                self._emit_close(True, exc)

    # asyncio.Protocol callbacks

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._stream = transport
        if self._destroyed:
            transport.abort()
            return
        self._restart_timer()
        self.emit(READY)

    def data_received(self, data: bytes) -> None:
        self._restart_timer()
        self.emit(DATA, data)

    def pause_writing(self) -> None:
        self._paused = True

    def resume_writing(self) -> None:
        self._paused = False
        while self._pending_writes and not self._paused:
            self._pending_writes.popleft()(None)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self._destroyed = True
        self._cancel_timer()
        if exc is not None:
            self.emit(ERROR, exc)
        self._emit_close(exc is not None, exc)

    # Transport protocol

    def set_timeout(self, timeout: float) -> None:
        if timeout < 0:
            raise ValueError(f"Idle timeout must be non-negative, got {timeout}")
        self._timeout = float(timeout)
        self._cancel_timer()
        if not self._destroyed:
            self._restart_timer()

    def write(self, data: bytes, callback: WriteCallback) -> None:
        if self._stream is None or self._destroyed or self._stream.is_closing():
            error = BrokenPipeError(errno.EPIPE, "Transport is not writable")
            self._loop.call_soon(callback, error)
            return
        self._stream.write(data)
        self._restart_timer()
        if self._paused:
            self._pending_writes.append(callback)
        else:
            self._loop.call_soon(callback, None)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._cancel_timer()
        if not self._connector.done():
            self._connector.cancel()
        if self._stream is not None:
            # abort() reports back through connection_lost(None)
            self._stream.abort()
        else:
            self._loop.call_soon(self._emit_close, False, None)

    # Internals

    def _restart_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._timeout > 0:
            self._timer = self._loop.call_later(self._timeout, self._on_idle)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_idle(self) -> None:
        self._timer = None
        self.emit(TIMEOUT)

    def _emit_close(self, had_error: bool, exc: Optional[BaseException]) -> None:
        if self._closed:
            return
        self._closed = True
        pending, self._pending_writes = self._pending_writes, deque()
        self.emit(CLOSE, had_error)
        for callback in pending:
            callback(exc or ConnectionResetError(errno.ECONNRESET, "Connection closed before data was sent"))

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "open" if self._stream else "connecting"
        return f"<TCPTransport {self.host}:{self.port} {state}>"


class TCPTransportFactory:
    """Factory for ``TCPTransport`` instances.

    Extra keyword arguments are forwarded to ``loop.create_connection`` for
    every transport this factory creates (e.g. ``family`` or ``local_addr``).
    """

    def __init__(self, **connect_options: Any):
        self._connect_options: Dict[str, Any] = connect_options

    def create_transport(self, host: str, port: int) -> TCPTransport:
        return TCPTransport(host, port, **self._connect_options)
