"""
Pytest configuration for linesocket tests.

This module contains fixtures and configuration for pytest.
"""

from typing import Any, List, Optional, Tuple
from unittest.mock import MagicMock

import anyio
import pytest

from linesocket.config import CONFIG_KEYS, ENV_PREFIX
from linesocket.transport.events import EventEmitter
from linesocket.transport.protocol import Transport, WriteCallback


# Fake Transport implementation
class FakeTransport(EventEmitter):
    """Event-emitting transport driven entirely by the test.

    Writes complete synchronously with ``write_error`` unless
    ``complete_writes`` is False, in which case their callbacks are kept in
    ``pending_writes`` for the test to fire.
    """

    def __init__(self, host: str = "", port: int = 0):
        super().__init__()
        self.host = host
        self.port = port
        self.timeout: Optional[float] = None
        self.written: List[bytes] = []
        self.pending_writes: List[WriteCallback] = []
        self.complete_writes = True
        self.write_error: Optional[BaseException] = None
        self.destroy_count = 0
        self._destroyed = False

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def set_timeout(self, timeout: float) -> None:
        self.timeout = timeout

    def write(self, data: bytes, callback: WriteCallback) -> None:
        self.written.append(data)
        if self.complete_writes:
            callback(self.write_error)
        else:
            self.pending_writes.append(callback)

    def destroy(self) -> None:
        self.destroy_count += 1
        self._destroyed = True


class FakeTransportFactory:
    """Factory handing out a single prepared FakeTransport."""

    def __init__(self, transport: Optional[FakeTransport] = None):
        self.transport = transport or FakeTransport()
        self.calls: List[Tuple[str, int]] = []

    def create_transport(self, host: str, port: int) -> Transport:
        self.calls.append((host, port))
        self.transport.host = host
        self.transport.port = port
        return self.transport


async def emit_after(transport: EventEmitter, delay: float, event: str, *args: Any) -> None:
    """Emit a notification after ``delay`` seconds."""
    await anyio.sleep(delay)
    transport.emit(event, *args)


@pytest.fixture
def fake_transport():
    """Fixture providing a fake transport."""
    return FakeTransport()


@pytest.fixture
def fake_factory(fake_transport):
    """Fixture providing a factory bound to the fake transport."""
    return FakeTransportFactory(fake_transport)


@pytest.fixture
def clean_env(monkeypatch):
    """Keep LINESOCKET_* variables from the outer environment out of tests."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(f"{ENV_PREFIX}{key.upper()}", raising=False)


# Mock Telemetry
@pytest.fixture
def mock_telemetry(monkeypatch):
    """Fixture providing mock telemetry components."""
    mock_tracer = MagicMock()
    mock_span = MagicMock()
    mock_span.__enter__.return_value = mock_span
    mock_tracer.start_as_current_span.return_value = mock_span
    mock_tracer.start_span.return_value = mock_span

    mock_logger = MagicMock()

    mock_get_telemetry = MagicMock(return_value=(mock_tracer, mock_logger))
    monkeypatch.setattr("linesocket.connection.get_telemetry", mock_get_telemetry)

    return mock_tracer, mock_logger


# Anyio Backend Selection - only use asyncio
@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Fixture to run tests with different anyio backends."""
    return request.param
