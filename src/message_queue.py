import threading
from dataclasses import dataclass, field
from queue import Queue, Empty
from typing import Generic, List, Optional, TypeVar

from exceptions import ChannelClosed, NoAnswer
from models import AccountSnapshot

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """
    Thread-safe FIFO channel that can be closed by the sender.
    Closing is queued in-band, so everything sent before close() is still
    received, in order, before the receiver sees ChannelClosed.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self, maxsize: int = 0):
        self._queue: Queue = Queue(maxsize=maxsize)
        self._shutdown_event = threading.Event()
        self._send_lock = threading.Lock()

    def send(self, message: T) -> None:
        """Add message to the channel, blocking while a bounded channel is full."""
        with self._send_lock:
            if self._shutdown_event.is_set():
                raise ChannelClosed("send on closed channel")
            self._queue.put(message)

    def receive(self, timeout: Optional[float] = DEFAULT_TIMEOUT) -> Optional[T]:
        """
        Get next message.
        Returns None if nothing arrived before the timeout, raises ChannelClosed
        once the channel is closed and drained.
        """
        try:
            message = self._queue.get(timeout=timeout)
        except Empty:
            return None

        if message is _CLOSED:
            # Leave the marker for any other receiver.
            self._queue.put(_CLOSED)
            raise ChannelClosed("channel closed")
        return message

    def close(self) -> None:
        """Signal no more messages will be sent. Idempotent."""
        with self._send_lock:
            if self._shutdown_event.is_set():
                return
            self._shutdown_event.set()
            self._queue.put(_CLOSED)

    def is_closed(self) -> bool:
        return self._shutdown_event.is_set()

    def is_empty(self) -> bool:
        return self._queue.empty()

    def __iter__(self):
        """Yield messages until the channel is closed and drained."""
        while True:
            try:
                message = self.receive(timeout=None)
            except ChannelClosed:
                return
            yield message


class ReplyChannel(Generic[T]):
    """Single-use channel carrying exactly one reply, or closed without one."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._answered = False

    def send(self, value: T) -> None:
        with self._lock:
            if self._event.is_set():
                raise ChannelClosed("reply channel already used")
            self._value = value
            self._answered = True
            self._event.set()

    def close(self) -> None:
        """Close without answering. No-op if a reply was already sent."""
        with self._lock:
            self._event.set()

    def receive(self, timeout: Optional[float] = None) -> T:
        """
        Wait for the reply.
        Raises NoAnswer if the channel was closed (or the wait timed out)
        without a reply.
        """
        if not self._event.wait(timeout):
            raise NoAnswer("timed out waiting for reply")
        if not self._answered:
            raise NoAnswer("reply channel closed without an answer")
        return self._value


@dataclass
class SnapshotQuery:
    """Command asking the ledger for every account snapshot, answered in sequence."""

    reply: ReplyChannel[List[AccountSnapshot]] = field(default_factory=ReplyChannel)
