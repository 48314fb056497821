from __future__ import annotations

NO_EXTENSION_LABEL = "(no extension)"


def format_bytes(num: int) -> str:
    if num < 0:
        return str(num)
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    x = float(num)
    for u in units:
        if x < 1024.0 or u == units[-1]:
            return f"{x:.2f} {u}" if u != "B" else f"{int(x)} {u}"
        x /= 1024.0
    return f"{x:.2f} PB"


def format_count(num: int) -> str:
    return f"{num:,}"


def extension_label(ext: str) -> str:
    return ext if ext else NO_EXTENSION_LABEL
