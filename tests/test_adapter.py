"""
Tests for the operation adapter.
"""

import anyio
import pytest

from linesocket.adapter import (
    MessageAssembler,
    OneShot,
    Operation,
    await_ready,
    receive,
    send,
)
from linesocket.errors import ConnectionRefusedError, SocketTimeoutError
from linesocket.transport.protocol import CLOSE, DATA, ERROR, READY, TIMEOUT
from tests.conftest import emit_after


# OneShot Tests
@pytest.mark.anyio
async def test_oneshot_first_settle_wins():
    """Test that only the first resolve or reject takes effect."""
    slot = OneShot()
    assert not slot.done
    assert slot.resolve("first") is True
    assert slot.reject(RuntimeError("late")) is False
    assert slot.resolve("second") is False
    assert slot.done
    assert await slot.wait() == "first"


@pytest.mark.anyio
async def test_oneshot_reject():
    """Test that a rejected slot raises on wait."""
    slot = OneShot()
    error = SocketTimeoutError("idle")
    slot.reject(error)
    with pytest.raises(SocketTimeoutError) as exc_info:
        await slot.wait()
    assert exc_info.value is error


@pytest.mark.anyio
async def test_oneshot_wait_suspends_until_settled():
    """Test that wait blocks until another task settles the slot."""
    slot = OneShot()

    async def settle():
        await anyio.sleep(0.005)
        slot.resolve(42)

    async with anyio.create_task_group() as tg:
        tg.start_soon(settle)
        assert await slot.wait() == 42


# Operation Tests
@pytest.mark.anyio
async def test_operation_releases_subscriptions(fake_transport):
    """Test that an operation cancels its subscriptions after settling."""
    operation = Operation(fake_transport)
    first = operation.once(READY, lambda: operation.resolve("ready"))
    second = operation.on(DATA, lambda chunk: None)

    fake_transport.emit(READY)
    assert await operation.wait() == "ready"

    assert not first.active
    assert not second.active
    assert fake_transport.listener_count(DATA) == 0


@pytest.mark.anyio
async def test_operation_release_on_cancel(fake_transport):
    """Test that a cancelled wait still releases subscriptions."""
    operation = Operation(fake_transport)
    operation.once(CLOSE, lambda had_error: None)

    with anyio.move_on_after(0.005):
        await operation.wait()

    assert fake_transport.listener_count(CLOSE) == 0


# MessageAssembler Tests
def test_assembler_single_chunk():
    """Test that a chunk ending with the delimiter completes a message."""
    messages = []
    assembler = MessageAssembler(messages.append, delimiter="\n")
    assembler(b"test\n")
    assert messages == ["test\n"]


def test_assembler_checks_current_chunk_only():
    """Test that only the tail of the latest chunk is checked."""
    messages = []
    assembler = MessageAssembler(messages.append, delimiter="\n")
    assembler(b"a\nb")
    assert messages == []
    assembler(b"c")
    assert messages == []
    assembler(b"d\n")
    assert messages == ["a\nbcd\n"]


def test_assembler_multibyte_delimiter():
    """Test a multi-character delimiter that arrives whole."""
    messages = []
    assembler = MessageAssembler(messages.append, delimiter="\r\n")
    assembler(b"HELO\r")
    assembler(b"\n")
    assert messages == []
    assembler(b" again\r\n")
    assert messages == ["HELO\r\n again\r\n"]


def test_assembler_split_utf8_sequence():
    """Test that a character split across chunks is decoded intact."""
    messages = []
    assembler = MessageAssembler(messages.append, delimiter="\n")
    encoded = "héllo\n".encode("utf-8")
    assembler(encoded[:2])
    assembler(encoded[2:])
    assert messages == ["héllo\n"]


def test_assembler_invalid_bytes_are_replaced():
    """Test that undecodable bytes do not raise."""
    messages = []
    assembler = MessageAssembler(messages.append, delimiter="\n")
    assembler(b"\xff\n")
    assert messages == ["\ufffd\n"]


def test_assembler_rejects_empty_delimiter():
    """Test that an empty delimiter is rejected."""
    with pytest.raises(ValueError):
        MessageAssembler(lambda message: None, delimiter="")


# Adapter function Tests
@pytest.mark.anyio
async def test_await_ready_error_first(fake_transport):
    """Test that an error before ready is classified as refused."""
    fake_transport.emit(READY)  # nobody listens yet

    async with anyio.create_task_group() as tg:
        tg.start_soon(emit_after, fake_transport, 0.005, ERROR, OSError("refused"))
        tg.start_soon(emit_after, fake_transport, 0.010, READY)
        with pytest.raises(ConnectionRefusedError):
            await await_ready(fake_transport)

    assert fake_transport.listener_count(READY) == 0
    assert fake_transport.listener_count(ERROR) == 0


@pytest.mark.anyio
async def test_send_resolves_on_completion(fake_transport):
    """Test that send returns once the write callback succeeds."""
    assert await send(fake_transport, b"payload") is None
    assert fake_transport.written == [b"payload"]


@pytest.mark.anyio
async def test_receive_timeout_after_partial_data(fake_transport):
    """Test that a timeout after partial data still fails the receive."""
    async with anyio.create_task_group() as tg:
        tg.start_soon(emit_after, fake_transport, 0.005, DATA, b"partial")
        tg.start_soon(emit_after, fake_transport, 0.010, TIMEOUT)
        with pytest.raises(SocketTimeoutError):
            await receive(fake_transport)


@pytest.mark.anyio
async def test_receive_first_terminal_event_wins(fake_transport):
    """Test that later terminal notifications do not affect the result."""
    assembler = lambda on_message: MessageAssembler(on_message, delimiter="\n")  # noqa: E731

    async def burst():
        await anyio.sleep(0.005)
        fake_transport.emit(DATA, b"done\n")
        fake_transport.emit(TIMEOUT)
        fake_transport.emit(CLOSE, True)

    async with anyio.create_task_group() as tg:
        tg.start_soon(burst)
        assert await receive(fake_transport, assembler) == "done\n"
