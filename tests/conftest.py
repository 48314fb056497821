from __future__ import annotations
import threading
from typing import Dict, List, Optional

import pytest

from diskview.errors import EntryUnavailable
from diskview.source import DirEntry, DirectorySource, FileEntry


class FakeSource(DirectorySource):
    """In-memory directory tree.

    `tree` maps a directory path to {"files": {name: size}, "dirs": [names]}.
    A size given as an exception instance is raised from file_size. Paths in
    `unreadable` fail to list, paths in `broken` raise RuntimeError, paths in
    `dirs_unreadable` list their files but fail to list subdirectories, and
    paths in `gates` block in list_files until their event is set. File paths
    in `size_gates` block in file_size the same way.
    """

    def __init__(self, tree: Dict[str, dict],
                 unreadable: Optional[List[str]] = None,
                 broken: Optional[List[str]] = None,
                 gates: Optional[Dict[str, threading.Event]] = None,
                 dirs_unreadable: Optional[List[str]] = None,
                 size_gates: Optional[Dict[str, threading.Event]] = None):
        self.tree = tree
        self.unreadable = set(unreadable or [])
        self.broken = set(broken or [])
        self.gates = gates or {}
        self.dirs_unreadable = set(dirs_unreadable or [])
        self.size_gates = size_gates or {}

    def _node(self, path: str) -> dict:
        if path in self.unreadable:
            raise EntryUnavailable(path, "Permission denied")
        if path in self.broken:
            raise RuntimeError(f"boom in {path}")
        return self.tree.get(path, {})

    def list_files(self, path: str) -> List[FileEntry]:
        gate = self.gates.get(path)
        if gate is not None:
            gate.wait(10)
        node = self._node(path)
        return [FileEntry(name, f"{path}/{name}") for name in node.get("files", {})]

    def file_size(self, entry: FileEntry) -> int:
        gate = self.size_gates.get(entry.path)
        if gate is not None:
            gate.wait(10)
        parent = entry.path[: -len(entry.name) - 1]
        size = self.tree[parent]["files"][entry.name]
        if isinstance(size, Exception):
            raise size
        return size

    def list_dirs(self, path: str) -> List[DirEntry]:
        node = self._node(path)
        if path in self.dirs_unreadable:
            raise EntryUnavailable(path, "Permission denied")
        return [DirEntry(name, f"{path}/{name}") for name in node.get("dirs", [])]


@pytest.fixture
def make_tree(tmp_path):
    """Create files from a {relative_path: size} mapping under tmp_path."""
    def _make(files: Dict[str, int], dirs: List[str] = ()):
        for d in dirs:
            (tmp_path / d).mkdir(parents=True, exist_ok=True)
        for rel, size in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_bytes(b"x" * size)
        return tmp_path
    return _make
