from __future__ import annotations


class EntryUnavailable(OSError):
    """A file or directory entry could not be read (permissions, transient I/O)."""

    def __init__(self, path: str, reason: str = ""):
        super().__init__(f"{path}: {reason}" if reason else path)
        self.path = path
        self.reason = reason


class UnsupportedCompareType(ValueError):
    pass
