from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager


class ReadWriteLock:
    """Allow many concurrent readers or a single writer.

    The writing thread may enter either side again, so a constructor or
    closer that calls back into the container fails with a container error
    instead of deadlocking. A thread holding the read side cannot take the
    write side; callers check ``is_reading`` first.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers: dict[int, int] = {}
        self._writer: int | None = None

    def is_reading(self) -> bool:
        """Return whether the current thread holds the read side."""
        with self._condition:
            return threading.get_ident() in self._readers

    @contextmanager
    def read(self) -> Generator[None, None, None]:
        """Hold the shared side for the duration of the block."""
        ident = threading.get_ident()
        if self._writer == ident:
            yield
            return

        with self._condition:
            while self._writer is not None:
                self._condition.wait()
            self._readers[ident] = self._readers.get(ident, 0) + 1
        try:
            yield
        finally:
            with self._condition:
                self._readers[ident] -= 1
                if not self._readers[ident]:
                    del self._readers[ident]
                if not self._readers:
                    self._condition.notify_all()

    @contextmanager
    def write(self) -> Generator[None, None, None]:
        """Hold the exclusive side for the duration of the block.

        Raises:
            RuntimeError: If the current thread holds the read side; waiting
                for it to be released would never finish.

        """
        ident = threading.get_ident()
        if self._writer == ident:
            yield
            return

        with self._condition:
            if ident in self._readers:
                msg = "Cannot acquire the write side while holding the read side."
                raise RuntimeError(msg)
            while self._writer is not None or self._readers:
                self._condition.wait()
            self._writer = ident
        try:
            yield
        finally:
            with self._condition:
                self._writer = None
                self._condition.notify_all()


__all__ = ["ReadWriteLock"]
