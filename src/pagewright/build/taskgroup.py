"""Concurrent units of work with error aggregation and cooperative cancellation.

A :class:`TaskGroup` runs each spawned callable on a thread pool. The
first unit to raise cancels the group: units that have not started yet
are dropped, and running units are expected to check
:attr:`TaskGroup.cancellation` at their own checkpoints. Every error is
kept, so :meth:`TaskGroup.wait` reports the full failure picture rather
than only the first failure.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import Any, Callable, List, Optional

LOGGER = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe flag shared by all units of one run."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> bool:
        """Set the flag; return True only for the call that actually set it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class GroupState(enum.Enum):
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class TaskGroup:
    """Run units concurrently and collect every exception they raise."""

    def __init__(self, max_workers: Optional[int] = None, *, name: str = "pagewright") -> None:
        self._max_workers = max_workers
        self._name = name
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._futures: List[Future] = []
        self._errors: List[Exception] = []
        self.cancellation = CancellationToken()
        self.state = GroupState.RUNNING

    @property
    def outstanding(self) -> int:
        with self._lock:
            return sum(1 for future in self._futures if not future.done())

    def spawn(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self.state is GroupState.DONE:
                self.cancellation = CancellationToken()
                self.state = GroupState.RUNNING
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix=self._name
                )
            token = self.cancellation
            future = self._executor.submit(self._run, token, fn, args, kwargs)
            self._futures.append(future)

    def _run(self, token: CancellationToken, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
        if token.is_cancelled():
            LOGGER.debug("Skipping %r, group already cancelled", fn)
            return
        try:
            fn(*args, **kwargs)
        except Exception as exc:
            self._record(token, exc)

    def _record(self, token: CancellationToken, exc: Exception) -> None:
        with self._lock:
            self._errors.append(exc)
            pending = list(self._futures)
        if token.cancel():
            LOGGER.debug("Cancelling remaining work after: %s", exc)
            for future in pending:
                future.cancel()

    def cancel(self) -> None:
        """Cancel from outside, for example on interrupt."""
        with self._lock:
            pending = list(self._futures)
        if self.cancellation.cancel():
            for future in pending:
                future.cancel()

    def wait(self) -> List[Exception]:
        """Block until every spawned unit has returned, then hand back all errors."""
        with self._lock:
            if self.state is GroupState.RUNNING:
                self.state = GroupState.DRAINING

        while True:
            with self._lock:
                pending = [future for future in self._futures if not future.done()]
            if not pending:
                break
            wait_futures(pending)

        with self._lock:
            errors, self._errors = self._errors, []
            self._futures = []
            executor, self._executor = self._executor, None
            self.state = GroupState.DONE

        if executor is not None:
            executor.shutdown(wait=True)
        return errors
