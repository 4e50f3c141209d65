"""Tests for the buffer arena."""

from __future__ import annotations

import threading

from pagewright.utils.arena import BufferArena


class TestBufferArena:
    """Test BufferArena acquire and release."""

    def test_acquire_returns_empty_buffer(self) -> None:
        """Fresh buffers are empty."""
        arena = BufferArena()

        buffer = arena.acquire()

        assert buffer.getvalue() == ""

    def test_release_resets_and_reuses(self) -> None:
        """Released buffers come back empty and are handed out again."""
        arena = BufferArena()
        buffer = arena.acquire()
        buffer.write("leftover content")

        arena.release(buffer)
        again = arena.acquire()

        assert again is buffer
        assert again.getvalue() == ""
        again.write("new")
        assert again.getvalue() == "new"

    def test_max_free_caps_pool(self) -> None:
        """Buffers beyond the cap are dropped."""
        arena = BufferArena(max_free=1)
        first, second = arena.acquire(), arena.acquire()

        arena.release(first)
        arena.release(second)

        assert len(arena) == 1

    def test_closed_buffer_not_pooled(self) -> None:
        """Closed buffers are never handed out again."""
        arena = BufferArena()
        buffer = arena.acquire()
        buffer.close()

        arena.release(buffer)

        assert len(arena) == 0

    def test_borrow_releases_on_error(self) -> None:
        """borrow() returns the buffer even when the body raises."""
        arena = BufferArena()

        try:
            with arena.borrow() as buffer:
                buffer.write("partial")
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert len(arena) == 1
        assert arena.acquire().getvalue() == ""

    def test_concurrent_use(self) -> None:
        """Many threads can borrow and release without sharing a buffer."""
        arena = BufferArena()
        seen = []
        lock = threading.Lock()
        errors = []

        def worker(index: int) -> None:
            for _ in range(50):
                with arena.borrow() as buffer:
                    if buffer.getvalue() != "":
                        errors.append("dirty buffer")
                    buffer.write(str(index))
                    with lock:
                        seen.append(buffer.getvalue())

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(seen) == 400
        assert all(value.isdigit() for value in seen)
