from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional

from .drives import list_drives
from .models import DEFAULT_CHILD_TIMEOUT, DEFAULT_MAX_WORKERS, CompareType, ScanConfig
from .scanner import ScanFolder, scan_path
from .traverser import Traverser
from .utils import extension_label, format_bytes, format_count

APP_NAME = "DiskView"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="diskview",
                                description="Per-extension disk usage of a directory tree.")
    p.add_argument("path", nargs="?", default=".", help="directory to scan (default: current)")
    p.add_argument("--by", default="size", choices=[c.value for c in CompareType],
                   help="order folders and file types by total size or file count")
    p.add_argument("--timeout", type=float, default=DEFAULT_CHILD_TIMEOUT,
                   help="seconds to wait for each subfolder before moving on")
    p.add_argument("--workers", type=int, default=DEFAULT_MAX_WORKERS,
                   help="maximum concurrent subfolder scans")
    p.add_argument("--top", type=int, default=10, help="number of file types to list")
    p.add_argument("--depth", type=int, default=1, help="folder tree depth to print")
    p.add_argument("--follow-symlinks", action="store_true")
    p.add_argument("--case-sensitive", action="store_true",
                   help="treat .TXT and .txt as different file types")
    p.add_argument("--dump", action="store_true", help="log a full bucket dump of the tree")
    p.add_argument("--drives", action="store_true", help="list mounted drives and exit")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def _setup_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _print_drives():
    for d in list_drives():
        print(f"{d.mountpoint:<24} {d.fstype:<8} {format_bytes(d.used):>12} / {format_bytes(d.total):<12} {d.percent:5.1f}%")


def _print_tree(node: ScanFolder, compare_type: CompareType, depth: int, indent: int = 0):
    print("  " * indent + node.display_name(compare_type))
    if indent >= depth:
        return
    for child in node.subfolder_mgr:
        _print_tree(child, compare_type, depth, indent + 1)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    if args.drives:
        _print_drives()
        return 0

    if not os.path.isdir(args.path):
        print(f"{APP_NAME}: not a directory: {args.path}", file=sys.stderr)
        return 2

    try:
        config = ScanConfig(
            compare_type=CompareType.parse(args.by),
            child_timeout=args.timeout,
            max_workers=args.workers,
            follow_symlinks=args.follow_symlinks,
            fold_case=not args.case_sensitive,
        )
    except ValueError as e:
        print(f"{APP_NAME}: {e}", file=sys.stderr)
        return 2

    def prog(cur: str, n: int):
        logger.info("[%d] %s", n, cur)

    res = scan_path(args.path, config=config, traverser=Traverser(progress=prog))
    totals = res.totals
    print(f"{res.scanned_path}: {format_bytes(totals.size)} in {format_count(totals.count)} files "
          f"({res.elapsed_sec:.2f}s)")

    print()
    print("File types:")
    for i, b in enumerate(res.root.bucket_mgr):
        if i >= args.top:
            break
        print(f"  {extension_label(b.extension):<16} {format_bytes(b.size):>12} {format_count(b.count):>10}")

    print()
    print("Folders:")
    _print_tree(res.root, config.compare_type, args.depth)

    if args.dump:
        dump_log = logging.getLogger("diskview.dump")
        dump_log.setLevel(logging.INFO)
        res.root.dump_scan_folder_recurse(dump_log)
    return 0


if __name__ == "__main__":
    sys.exit(main())
