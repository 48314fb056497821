from __future__ import annotations
import logging
import threading
from typing import Dict, Iterator, List, Optional

from .models import Bucket, CompareType, check_compare_type
from .utils import extension_label, format_bytes

logger = logging.getLogger(__name__)


class BucketManager:
    """Per-extension buckets for one directory level.

    Every mutation and every snapshot happens under the manager's own lock, so a
    parent merging a child that is still being scanned reads a consistent copy
    (never a bucket with its size updated but not its count).
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._buckets: Dict[str, Bucket] = {}
        self._order: List[str] = []
        self._totals: Optional[Bucket] = None
        self._totals_valid = False

    def __len__(self) -> int:
        return len(self._buckets)

    def __contains__(self, extension: str) -> bool:
        return extension in self._buckets

    def __iter__(self) -> Iterator[Bucket]:
        with self._lock:
            buckets = [self._buckets[k] for k in self._order]
        return iter(buckets)

    def get(self, extension: str) -> Optional[Bucket]:
        return self._buckets.get(extension)

    def _bucket_for(self, extension: str) -> Bucket:
        b = self._buckets.get(extension)
        if b is None:
            b = Bucket(extension)
            self._buckets[extension] = b
            self._order.append(extension)
        return b

    def add_file(self, extension: str, size: int):
        with self._lock:
            self._bucket_for(extension).add(int(size))
            self._totals_valid = False

    def add_buckets(self, other: "BucketManager"):
        if other is self:
            raise ValueError("cannot merge a BucketManager into itself")
        snap = other.snapshot()
        with self._lock:
            for ext, b in snap.items():
                self._bucket_for(ext).merge(b)
            self._totals_valid = False

    def snapshot(self) -> Dict[str, Bucket]:
        with self._lock:
            return {k: self._buckets[k].copy() for k in self._order}

    def compute_totals_bucket(self) -> Bucket:
        totals = Bucket("")
        with self._lock:
            for b in self._buckets.values():
                totals.merge(b)
        return totals

    @property
    def totals_bucket(self) -> Bucket:
        with self._lock:
            if not self._totals_valid or self._totals is None:
                self._totals = self.compute_totals_bucket()
                self._totals_valid = True
            return self._totals

    def clear_totals(self):
        self._totals_valid = False

    def sort(self, compare_type: CompareType):
        # largest first; equal metrics fall back to the extension itself
        check_compare_type(compare_type)
        with self._lock:
            self._order.sort(key=lambda k: (-self._buckets[k].metric(compare_type), k))

    def dump_buckets(self, log: logging.Logger = logger):
        for b in self:
            log.info("  %-16s %12s %8d files", extension_label(b.extension), format_bytes(b.size), b.count)
