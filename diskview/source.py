"""
Directory sources: what the scanner reads a directory through.

A source answers three questions per directory: which files it holds, how large
one of those files is, and which subdirectories it holds. Any read failure is
raised as EntryUnavailable so the scanner can log it and skip the entry.
"""
from __future__ import annotations
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import EntryUnavailable


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str
    dirent: Optional[os.DirEntry] = field(default=None, compare=False, repr=False)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1]


@dataclass(frozen=True)
class DirEntry:
    name: str
    path: str


class DirectorySource:
    def list_files(self, path: str) -> List[FileEntry]:
        raise NotImplementedError

    def file_size(self, entry: FileEntry) -> int:
        raise NotImplementedError

    def list_dirs(self, path: str) -> List[DirEntry]:
        raise NotImplementedError


class OsDirectorySource(DirectorySource):
    """os.scandir-backed source.

    `list_files` reads the directory once and parks its subdirectories for the
    `list_dirs` call that follows for the same path; file sizes come from the
    scandir entry's own stat.
    """

    def __init__(self, follow_symlinks: bool = False):
        self.follow_symlinks = follow_symlinks
        self._lock = threading.Lock()
        self._pending_dirs: Dict[str, List[DirEntry]] = {}

    def _read(self, path: str):
        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise EntryUnavailable(path, e.strerror or str(e)) from e

        files: List[FileEntry] = []
        dirs: List[DirEntry] = []
        for entry in entries:
            try:
                if entry.is_symlink() and not self.follow_symlinks:
                    continue
                if entry.is_dir(follow_symlinks=self.follow_symlinks):
                    dirs.append(DirEntry(entry.name, entry.path))
                elif entry.is_file(follow_symlinks=self.follow_symlinks):
                    files.append(FileEntry(entry.name, entry.path, entry))
            except OSError:
                continue
        return files, dirs

    def list_files(self, path: str) -> List[FileEntry]:
        files, dirs = self._read(path)
        with self._lock:
            self._pending_dirs[path] = dirs
        return files

    def file_size(self, entry: FileEntry) -> int:
        try:
            if entry.dirent is not None:
                st = entry.dirent.stat(follow_symlinks=self.follow_symlinks)
            else:
                st = os.stat(entry.path, follow_symlinks=self.follow_symlinks)
        except OSError as e:
            raise EntryUnavailable(entry.path, e.strerror or str(e)) from e
        return int(getattr(st, "st_size", 0) or 0)

    def list_dirs(self, path: str) -> List[DirEntry]:
        with self._lock:
            dirs = self._pending_dirs.pop(path, None)
        if dirs is None:
            _, dirs = self._read(path)
        return dirs
