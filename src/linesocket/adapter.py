"""
Operation adapter: turns transport notifications into awaitable results.

Every operation creates an ``Operation`` holding fresh subscriptions and a
single-fire result slot. Whichever terminal notification fires first settles
the slot; the others become inert, and all subscriptions are released once the
awaiting task resumes.
"""

import codecs
import os
from typing import Any, Callable, Generic, List, Optional, TypeVar

import anyio

from linesocket.errors import (
    ERROR_ON_READ,
    ERROR_ON_WRITE,
    Condition,
    SocketError,
    classify,
    classify_close,
)
from linesocket.transport.protocol import (
    CLOSE,
    DATA,
    ERROR,
    READY,
    TIMEOUT,
    Listener,
    Subscription,
    Transport,
)

T = TypeVar("T")

EOL = os.linesep

MessageHandler = Callable[[str], Any]
ChunkHandler = Callable[[bytes], None]
AssemblerFactory = Callable[[MessageHandler], ChunkHandler]


class OneShot(Generic[T]):
    """A result slot that can be settled exactly once.

    The first call to ``resolve`` or ``reject`` wins; later calls return False
    and change nothing.
    """

    def __init__(self):
        self._event = anyio.Event()
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None

    @property
    def done(self) -> bool:
        return self._event.is_set()

    def resolve(self, value: Optional[T] = None) -> bool:
        if self._event.is_set():
            return False
        self._value = value
        self._event.set()
        return True

    def reject(self, error: BaseException) -> bool:
        if self._event.is_set():
            return False
        self._error = error
        self._event.set()
        return True

    async def wait(self) -> T:
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return self._value


class Operation(Generic[T]):
    """One adapter cycle against a transport."""

    def __init__(self, transport: Transport):
        self._transport = transport
        self._subscriptions: List[Subscription] = []
        self.result: OneShot[T] = OneShot()

    def once(self, event: str, listener: Listener) -> Subscription:
        subscription = self._transport.once(event, listener)
        self._subscriptions.append(subscription)
        return subscription

    def on(self, event: str, listener: Listener) -> Subscription:
        subscription = self._transport.on(event, listener)
        self._subscriptions.append(subscription)
        return subscription

    def resolve(self, value: Optional[T] = None) -> None:
        self.result.resolve(value)

    def reject(self, error: SocketError) -> None:
        self.result.reject(error)

    def release(self) -> None:
        """Cancel every subscription this operation made."""
        while self._subscriptions:
            self._subscriptions.pop().cancel()

    async def wait(self) -> T:
        try:
            return await self.result.wait()
        finally:
            self.release()


class MessageAssembler:
    """Accumulates decoded chunks until a chunk ends with the delimiter.

    Only the tail of the most recent chunk is checked, so a delimiter that
    arrives mid-chunk does not complete the message.
    """

    def __init__(
        self,
        on_message: MessageHandler,
        delimiter: str = EOL,
        encoding: str = "utf-8",
    ):
        if not delimiter:
            raise ValueError("Message delimiter must not be empty")
        self._on_message = on_message
        self.delimiter = delimiter
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._chunks: List[str] = []

    def __call__(self, chunk: bytes) -> None:
        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        self._chunks.append(text)
        if text.endswith(self.delimiter):
            self._on_message("".join(self._chunks))


async def await_ready(transport: Transport) -> None:
    """Wait until the transport is ready.

    Raises:
        ConnectionRefusedError: If the transport reports an error first.
    """
    operation: Operation[None] = Operation(transport)
    operation.once(ERROR, lambda cause: operation.reject(classify(Condition.CONNECT_ERROR, cause)))
    operation.once(READY, lambda *_: operation.resolve())
    await operation.wait()


async def send(transport: Transport, data: bytes) -> None:
    """Write ``data`` and wait for the transport to accept it.

    Raises:
        TransmissionError: If the write fails or the transport closes with
            an error first.
        ConnectionClosedError: If the transport closes cleanly first.
    """
    # a finished or abandoned receive must not keep consuming data
    transport.remove_all_listeners(DATA)

    operation: Operation[None] = Operation(transport)
    operation.once(CLOSE, lambda had_error: operation.reject(classify_close(had_error, ERROR_ON_WRITE)))

    def on_written(error: Optional[BaseException] = None) -> None:
        if error:
            operation.reject(classify(Condition.WRITE_FAILED, error))
        else:
            operation.resolve()

    transport.write(data, on_written)
    await operation.wait()


async def receive(transport: Transport, assembler_factory: AssemblerFactory = MessageAssembler) -> str:
    """Wait for one complete message.

    Raises:
        SocketTimeoutError: If the transport's idle timeout fires first.
        TransmissionError: If the transport closes with an error first.
        ConnectionClosedError: If the transport closes cleanly first.
    """
    operation: Operation[str] = Operation(transport)
    operation.once(TIMEOUT, lambda *_: operation.reject(classify(Condition.IDLE_TIMEOUT)))
    operation.once(CLOSE, lambda had_error: operation.reject(classify_close(had_error, ERROR_ON_READ)))
    operation.on(DATA, assembler_factory(operation.resolve))
    return await operation.wait()
