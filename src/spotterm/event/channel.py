"""Multi-producer, single-consumer request channel."""

import queue
import threading
from typing import Iterator

from loguru import logger

from .requests import ClientRequest

# Marks the end of the stream for the consumer
_CLOSED = object()


class ChannelClosedError(Exception):
    """Raised when submitting to a channel whose consumer has shut down."""


class RequestChannel:
    """Unbounded FIFO queue of client requests.

    Any thread may submit; exactly one consumer iterates. Iteration ends once
    the channel is closed and every request submitted before the close has
    been consumed.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()

    def submit(self, request: ClientRequest) -> None:
        """Enqueue a request without blocking.

        Raises:
            ChannelClosedError: If the channel has been closed
        """
        with self._lock:
            if self._closed:
                raise ChannelClosedError(f"request channel closed, dropping {request}")
            self._queue.put(request)

    def close(self) -> None:
        """Stop accepting requests and wake the consumer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)
        logger.debug("Request channel closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[ClientRequest]:
        while True:
            request = self._queue.get()
            if request is _CLOSED:
                return
            yield request
