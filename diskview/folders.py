from __future__ import annotations
import logging
from typing import Iterator, List, TYPE_CHECKING

from .models import CompareType, check_compare_type

if TYPE_CHECKING:
    from .scanner import ScanFolder

logger = logging.getLogger(__name__)


class FolderManager:
    """Immediate child nodes of one ScanFolder, in launch order until sorted."""

    def __init__(self):
        self._folders: List["ScanFolder"] = []

    def __len__(self) -> int:
        return len(self._folders)

    def __iter__(self) -> Iterator["ScanFolder"]:
        return iter(list(self._folders))

    def __getitem__(self, idx: int) -> "ScanFolder":
        return self._folders[idx]

    def add_folder(self, folder: "ScanFolder"):
        self._folders.append(folder)

    def remove_folder(self, folder: "ScanFolder"):
        self._folders.remove(folder)

    def sort(self, compare_type: CompareType):
        check_compare_type(compare_type)
        self._folders.sort(key=lambda f: (-f.totals_bucket.metric(compare_type), f.name, f.path))

    def dump_subfolder_list(self, compare_type: CompareType, log: logging.Logger = logger):
        for f in self._folders:
            log.info("  %s", f.display_name(compare_type))
