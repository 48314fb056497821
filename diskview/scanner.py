from __future__ import annotations
import logging
import os
import time
from concurrent.futures import Future, wait
from typing import Any, Callable, Iterator, List, Optional

from .buckets import BucketManager
from .errors import EntryUnavailable, UnsupportedCompareType
from .folders import FolderManager
from .models import Bucket, CompareType, ScanConfig, ScanResult
from .pool import ScanPool
from .source import DirectorySource, OsDirectorySource
from .traverser import Traverser

logger = logging.getLogger(__name__)

FolderVisitor = Callable[["ScanFolder"], None]
FolderContextVisitor = Callable[["ScanFolder", Any], None]


class ScanFolder:
    """One directory of a scan: its own buckets plus its immediate subfolders.

    After `scan()` returns, the node's buckets hold the files of this directory
    and of every subfolder merged in before its wait bound ran out. A subfolder
    that overran keeps scanning in the background; whatever it adds afterwards
    shows up in its own node but not in the parent's buckets.
    """

    def __init__(self, path: str,
                 config: Optional[ScanConfig] = None,
                 traverser: Optional[Traverser] = None,
                 source: Optional[DirectorySource] = None,
                 pool: Optional[ScanPool] = None,
                 name: Optional[str] = None):
        self.path = path
        self.name = name or os.path.basename(path.rstrip("\\/")) or path
        self.config = config or ScanConfig()
        self.traverser = traverser or Traverser()
        self.source = source or OsDirectorySource(self.config.follow_symlinks)
        self.unreadable = False
        self._pool = pool
        self._mgr = BucketManager()
        self._subfolder_mgr = FolderManager()

    def __repr__(self) -> str:
        return f"ScanFolder({self.path!r})"

    @property
    def bucket_mgr(self) -> BucketManager:
        return self._mgr

    @property
    def subfolder_mgr(self) -> FolderManager:
        return self._subfolder_mgr

    @property
    def totals_bucket(self) -> Bucket:
        return self._mgr.totals_bucket

    def clear_totals(self):
        """Forget the cached totals; the next read recomputes them from the buckets."""
        self._mgr.clear_totals()

    # -------------------- scan --------------------
    def scan(self):
        self.traverser.message(self.path)
        pool = self._pool
        own_pool = pool is None
        if own_pool:
            pool = ScanPool(self.config.max_workers)
        try:
            self._scan(pool)
        except Exception:
            logger.exception("Ignoring error in folder %s", self.path)
        finally:
            if own_pool:
                pool.close()

    def _scan(self, pool: ScanPool):
        cfg = self.config
        try:
            files = self.source.list_files(self.path)
        except EntryUnavailable as e:
            self.unreadable = True
            logger.warning("Ignoring error %s in folder %s", e, self.path)
            return
        for f in files:
            try:
                size = self.source.file_size(f)
            except EntryUnavailable as e:
                logger.warning("Ignoring error %s in folder %s", e, self.path)
                continue
            self._mgr.add_file(cfg.normalize_extension(f.extension), size)

        try:
            dirs = self.source.list_dirs(self.path)
        except EntryUnavailable as e:
            logger.warning("Ignoring error %s in folder %s", e, self.path)
            dirs = []

        futures: List[Future] = []
        for d in dirs:
            child = ScanFolder(d.path, cfg, self.traverser, self.source, pool, name=d.name)
            self._subfolder_mgr.add_folder(child)
            fut = pool.submit(child.scan)
            futures.append(fut)
            done, _ = wait([fut], timeout=cfg.child_timeout)
            if not done:
                logger.info("Stopped waiting for %s after %.1fs", child.path, cfg.child_timeout)
            elif child.unreadable:
                self._subfolder_mgr.remove_folder(child)
                continue
            self._mgr.add_buckets(child.bucket_mgr)

        if futures:
            _, not_done = wait(futures, timeout=cfg.aggregate_timeout)
            if not_done:
                logger.warning("Abandoning %d unfinished subfolder scan(s) under %s",
                               len(not_done), self.path)

        # subfolders and buckets (file types) are the two things a node sorts
        self._mgr.sort(cfg.compare_type)
        self._subfolder_mgr.sort(cfg.compare_type)

    # -------------------- ordering / display --------------------
    def sort(self, compare_type: Optional[CompareType] = None):
        """Re-sort buckets and subfolders of the whole subtree."""
        ct = self.config.compare_type if compare_type is None else compare_type
        for f in self._subfolder_mgr:
            f.sort(ct)
        self._mgr.sort(ct)
        self._subfolder_mgr.sort(ct)

    def compare_to(self, other: object, compare_type: Optional[CompareType] = None) -> int:
        # folders compare by comparing their totals buckets
        if not isinstance(other, ScanFolder):
            raise TypeError("ScanFolders can only compare to other ScanFolders.")
        ct = self.config.compare_type if compare_type is None else compare_type
        return self.totals_bucket.compare_to(other.totals_bucket, ct)

    def display_name(self, compare_type: Optional[CompareType] = None) -> str:
        ct = self.config.compare_type if compare_type is None else compare_type
        if ct is CompareType.BY_SIZE:
            return f"{self.name} {self.totals_bucket.size:,}"
        if ct is CompareType.BY_COUNT:
            return f"{self.name} {self.totals_bucket.count:,}"
        raise UnsupportedCompareType(f"Unsupported comparison type in ScanFolder.display_name: {ct!r}")

    # -------------------- traversal --------------------
    def visit(self, visitor: FolderVisitor):
        self.traverser.message(self.path)
        visitor(self)
        for f in self._subfolder_mgr:
            f.visit(visitor)

    def visit_with(self, visitor: FolderContextVisitor, context: Any):
        self.traverser.message(self.path)
        visitor(self, context)
        for f in self._subfolder_mgr:
            f.visit_with(visitor, context)

    def iter_folders(self) -> Iterator["ScanFolder"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.subfolder_mgr)))

    # -------------------- dumps --------------------
    def dump_scan_folder(self, log: logging.Logger = logger):
        log.info("Dump of folder %s", self.path)
        self._mgr.dump_buckets(log)

    def dump_scan_folder_recurse(self, log: logging.Logger = logger):
        self.dump_scan_folder(log)
        self._subfolder_mgr.dump_subfolder_list(self.config.compare_type, log)
        for f in self._subfolder_mgr:
            f.dump_scan_folder_recurse(log)


def scan_path(path: str,
              config: Optional[ScanConfig] = None,
              traverser: Optional[Traverser] = None,
              source: Optional[DirectorySource] = None) -> ScanResult:
    t0 = time.time()
    config = config or ScanConfig()
    if source is None:
        path = os.path.abspath(path)
        source = OsDirectorySource(config.follow_symlinks)
    traverser = traverser or Traverser()

    with ScanPool(config.max_workers) as pool:
        root = ScanFolder(path, config, traverser, source, pool)
        root.scan()

    elapsed = time.time() - t0
    logger.info("Scanned %s in %.2fs", path, elapsed)
    return ScanResult(
        root=root,
        totals=root.totals_bucket.copy(),
        scanned_path=path,
        elapsed_sec=elapsed,
        messages=traverser.messages,
    )
