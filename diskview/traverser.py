from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_INTERVAL = 0.10

ProgressCb = Callable[[str, int], None]  # (current_path, messages_so_far)


class Traverser:
    """Message sink for scan and visit progress.

    Every message is counted and logged at DEBUG; the optional progress callback
    is throttled to at most one call per `min_interval` seconds.
    """

    def __init__(self, progress: Optional[ProgressCb] = None,
                 min_interval: float = DEFAULT_PROGRESS_INTERVAL):
        self.progress = progress
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._messages = 0
        self._last_emit: Optional[float] = None

    @property
    def messages(self) -> int:
        return self._messages

    def message(self, path: str):
        with self._lock:
            self._messages += 1
            n = self._messages
            now = time.monotonic()
            emit = self.progress is not None and (
                self._last_emit is None or (now - self._last_emit) >= self.min_interval)
            if emit:
                self._last_emit = now
        logger.debug("%s", path)
        if emit:
            try:
                self.progress(path, n)
            except Exception:
                logger.exception("Progress callback failed for %s", path)
