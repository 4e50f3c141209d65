"""Pool of reusable text buffers shared by render workers."""

from __future__ import annotations

import io
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional


class BufferArena:
    """Thread-safe free list of ``io.StringIO`` buffers.

    Buffers handed out by :meth:`acquire` are always empty. Reuse is best
    effort only; callers must not rely on getting a particular buffer back.
    """

    def __init__(
        self,
        factory: Callable[[], io.StringIO] = io.StringIO,
        *,
        max_free: Optional[int] = None,
    ) -> None:
        self._factory = factory
        self._max_free = max_free
        self._free: List[io.StringIO] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._free)

    def acquire(self) -> io.StringIO:
        with self._lock:
            if self._free:
                return self._free.pop()
        return self._factory()

    def release(self, buffer: io.StringIO) -> None:
        if buffer.closed:
            return
        buffer.seek(0)
        buffer.truncate(0)
        with self._lock:
            if self._max_free is None or len(self._free) < self._max_free:
                self._free.append(buffer)

    @contextmanager
    def borrow(self) -> Iterator[io.StringIO]:
        buffer = self.acquire()
        try:
            yield buffer
        finally:
            self.release(buffer)
