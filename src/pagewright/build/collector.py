"""Single-consumer ordering of build results.

Workers hand results to :meth:`OrderedCollector.submit`; one consumer
thread owns the result list and keeps it sorted by document time, newest
first, inserting each result with a binary search as it arrives.
"""

from __future__ import annotations

import bisect
import logging
import queue
import threading
from typing import List, Optional

from pagewright.build.taskgroup import CancellationToken
from pagewright.models import BuildResult

LOGGER = logging.getLogger(__name__)

_CLOSE = object()


def _newest_first(result: BuildResult) -> float:
    return -result.time.timestamp()


class OrderedCollector:
    def __init__(self, cancellation: Optional[CancellationToken] = None) -> None:
        self._cancellation = cancellation
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._results: List[BuildResult] = []
        self._lock = threading.Lock()
        self._closed = False
        self._thread = threading.Thread(target=self._consume, name="pagewright-collector", daemon=True)

    def start(self) -> "OrderedCollector":
        self._thread.start()
        return self

    def submit(self, result: BuildResult, cancellation: Optional[CancellationToken] = None) -> bool:
        """Hand ``result`` to the consumer.

        Returns False without queueing when ``cancellation`` has fired or
        the collector has been closed.
        """
        if cancellation is not None and cancellation.is_cancelled():
            LOGGER.debug("Dropping %s, build cancelled", result.source)
            return False
        with self._lock:
            if self._closed:
                LOGGER.debug("Dropping %s, collector closed", result.source)
                return False
            self._queue.put(result)
        return True

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if item is _CLOSE:
                break
            if self._cancellation is not None and self._cancellation.is_cancelled():
                LOGGER.debug("Discarding %s after cancellation", item.source)
                continue
            bisect.insort(self._results, item, key=_newest_first)
            LOGGER.info("%s -> %s", item.source, item.destination)

    def close(self) -> List[BuildResult]:
        """Stop accepting results, wait for the consumer, return the ordered list."""
        with self._lock:
            if not self._closed:
                self._closed = True
                self._queue.put(_CLOSE)
        if self._thread.is_alive():
            self._thread.join()
        return list(self._results)

    @property
    def results(self) -> List[BuildResult]:
        return list(self._results)
