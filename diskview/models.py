from __future__ import annotations
import os
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .errors import UnsupportedCompareType

if TYPE_CHECKING:
    from .scanner import ScanFolder

DEFAULT_CHILD_TIMEOUT = 20.0
DEFAULT_AGGREGATE_FACTOR = 10
DEFAULT_MAX_WORKERS = min(32, (os.cpu_count() or 1) + 4)


class CompareType(Enum):
    BY_SIZE = "size"
    BY_COUNT = "count"

    @classmethod
    def parse(cls, text: str) -> "CompareType":
        try:
            return cls(text.strip().lower())
        except ValueError:
            raise UnsupportedCompareType(f"Unsupported comparison type: {text!r}") from None


def check_compare_type(compare_type) -> CompareType:
    if compare_type is CompareType.BY_SIZE or compare_type is CompareType.BY_COUNT:
        return compare_type
    raise UnsupportedCompareType(f"Unsupported comparison type: {compare_type!r}")


@dataclass
class Bucket:
    extension: str
    size: int = 0
    count: int = 0

    def add(self, size: int, count: int = 1):
        if size < 0 or count < 0:
            raise ValueError(f"negative add to bucket {self.extension!r}: size={size} count={count}")
        self.size += size
        self.count += count

    def merge(self, other: "Bucket"):
        self.add(other.size, other.count)

    def metric(self, compare_type: CompareType) -> int:
        if compare_type is CompareType.BY_SIZE:
            return self.size
        if compare_type is CompareType.BY_COUNT:
            return self.count
        raise UnsupportedCompareType(f"Unsupported comparison type: {compare_type!r}")

    def compare_to(self, other: object, compare_type: CompareType) -> int:
        if not isinstance(other, Bucket):
            raise TypeError("Buckets can only compare to other Buckets.")
        a = self.metric(compare_type)
        b = other.metric(compare_type)
        return (a > b) - (a < b)

    def copy(self) -> "Bucket":
        return Bucket(self.extension, self.size, self.count)


@dataclass
class ScanConfig:
    compare_type: CompareType = CompareType.BY_SIZE
    child_timeout: float = DEFAULT_CHILD_TIMEOUT    # seconds to wait per child before moving on
    aggregate_factor: int = DEFAULT_AGGREGATE_FACTOR
    max_workers: int = DEFAULT_MAX_WORKERS
    follow_symlinks: bool = False
    fold_case: bool = True

    def __post_init__(self):
        check_compare_type(self.compare_type)
        if self.child_timeout <= 0:
            raise ValueError("child_timeout must be positive")
        if self.aggregate_factor < 1:
            raise ValueError("aggregate_factor must be >= 1")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    @property
    def aggregate_timeout(self) -> float:
        return self.child_timeout * self.aggregate_factor

    def normalize_extension(self, ext: str) -> str:
        return ext.lower() if self.fold_case else ext


@dataclass
class ScanResult:
    root: "ScanFolder"
    totals: Bucket
    scanned_path: str
    elapsed_sec: float
    messages: int = 0


@dataclass
class DriveInfo:
    mountpoint: str
    fstype: str
    total: int
    used: int
    free: int
    percent: float
