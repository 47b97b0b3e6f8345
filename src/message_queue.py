import threading
from queue import Queue, Empty
from typing import Generic, Iterator, Optional, TypeVar

T = TypeVar("T")


class ChannelClosedError(RuntimeError):
    """Raised when publishing to a channel that has already been closed."""


class Channel(Generic[T]):
    """
    Thread-safe FIFO channel between pipeline stages.
    All synchronization is internal - callers never need to lock.

    capacity=0 means unbounded; otherwise publishers block while the channel is full.
    Closing is the end-of-stream signal: iteration stops once closed and drained.
    """

    DEFAULT_TIMEOUT = 0.1

    def __init__(self, capacity: int = 0, timeout: float = DEFAULT_TIMEOUT):
        self._queue: Queue[T] = Queue(maxsize=capacity)
        self._closed_event = threading.Event()
        self._timeout = timeout

    def publish_message(self, message: T) -> None:
        """Add message to the channel. Blocks while a bounded channel is full. Thread-safe."""
        if message is None:
            raise ValueError("None is reserved for an empty poll and cannot be published")
        if self.is_closed():
            raise ChannelClosedError("cannot publish to a closed channel")
        self._queue.put(message)

    def consume_message(self) -> Optional[T]:
        """
        Get next message.
        Returns None if the channel is still empty after timeout.
        Thread-safe.
        """
        try:
            return self._queue.get(timeout=self._timeout)
        except Empty:
            return None

    def is_empty(self) -> bool:
        return self._queue.empty()

    def close(self) -> None:
        """Signal no more messages will be published."""
        self._closed_event.set()

    def is_closed(self) -> bool:
        return self._closed_event.is_set()

    def __iter__(self) -> Iterator[T]:
        while True:
            message = self.consume_message()
            if message is None:
                # Publishers put before they close, so closed and empty means drained.
                if self.is_closed() and self.is_empty():
                    return
                continue
            yield message
