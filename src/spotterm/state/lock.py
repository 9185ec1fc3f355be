"""Reader-writer lock guarding one sub-state."""

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class ReadWriteLock:
    """Many readers or one writer; writers are preferred once waiting.

    Not re-entrant: a thread holding the lock must release it before
    acquiring it again.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class Locked(Generic[T]):
    """A value that is only reachable through its lock guards."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = ReadWriteLock()

    @contextmanager
    def read(self) -> Iterator[T]:
        self._lock.acquire_read()
        try:
            yield self._value
        finally:
            self._lock.release_read()

    @contextmanager
    def write(self) -> Iterator[T]:
        self._lock.acquire_write()
        try:
            yield self._value
        finally:
            self._lock.release_write()
