from __future__ import annotations
import logging
import os
from typing import List

import psutil

from .models import DriveInfo

logger = logging.getLogger(__name__)


def list_drives() -> List[DriveInfo]:
    """Mounted drives that can serve as scan roots, sorted by mountpoint."""
    drives: List[DriveInfo] = []
    seen = set()
    for p in psutil.disk_partitions(all=False):
        mp = p.mountpoint
        if not mp:
            continue
        mp_norm = os.path.abspath(mp)
        if mp_norm in seen:
            continue
        seen.add(mp_norm)
        try:
            u = psutil.disk_usage(mp_norm)
        except OSError as e:
            logger.debug("Skipping drive %s: %s", mp_norm, e)
            continue
        drives.append(DriveInfo(
            mountpoint=mp_norm,
            fstype=p.fstype,
            total=int(u.total),
            used=int(u.used),
            free=int(u.free),
            percent=float(u.percent),
        ))
    drives.sort(key=lambda d: d.mountpoint.lower())
    return drives
