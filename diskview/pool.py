from __future__ import annotations
import logging
import queue
import threading
from concurrent.futures import Future
from typing import Callable, List

logger = logging.getLogger(__name__)


class ScanPool:
    """Worker pool shared by every node of one scan.

    `max_workers` daemon threads take submitted scans from a queue. When every
    worker is busy, the scan gets a dedicated daemon overflow thread instead, so
    the caller can always wait on the returned future with a bound. A parent
    keeps at most one child it is waiting on, so overflow threads are limited to
    one per level of the tree being walked plus the subtrees already abandoned.

    All threads are daemons: a scan that was abandoned never keeps the process
    alive.
    """

    def __init__(self, max_workers: int, thread_name_prefix: str = "diskview-scan"):
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix
        self._slots = threading.BoundedSemaphore(max_workers)
        self._tasks: "queue.Queue" = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._overflow_runs = 0
        self._workers: List[threading.Thread] = []
        for i in range(max_workers):
            t = threading.Thread(target=self._worker, name=f"{thread_name_prefix}_{i}", daemon=True)
            t.start()
            self._workers.append(t)

    def __enter__(self) -> "ScanPool":
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def overflow_runs(self) -> int:
        return self._overflow_runs

    def submit(self, fn: Callable[[], None]) -> Future:
        fut: Future = Future()
        with self._lock:
            if not self._closed and self._slots.acquire(blocking=False):
                self._tasks.put((fut, fn))
                return fut
            self._overflow_runs += 1
            n = self._overflow_runs
        t = threading.Thread(target=self._run, args=(fut, fn),
                             name=f"{self.thread_name_prefix}-overflow_{n}", daemon=True)
        t.start()
        return fut

    def _worker(self):
        while True:
            item = self._tasks.get()
            if item is None:
                return
            fut, fn = item
            try:
                self._run(fut, fn)
            finally:
                self._slots.release()

    @staticmethod
    def _run(fut: Future, fn: Callable[[], None]):
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(fn())
        except Exception as e:
            logger.debug("Scan task failed: %s", e)
            fut.set_exception(e)

    def close(self):
        # overrun tasks are abandoned, not cancelled: do not wait for them
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for _ in self._workers:
            self._tasks.put(None)
