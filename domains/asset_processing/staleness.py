"""
Staleness checks between a staging file and its output.

A destination is regenerated when it is missing or strictly older than its
source. Equal timestamps count as fresh. On filesystems with coarse timestamp
resolution (FAT and some network mounts round to 1-2 seconds) an edit made
within the same resolution window as the last output write is not detected
until the source is touched again.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger


def comparison_time(stats: os.stat_result) -> Optional[int]:
    """
    Timestamp used for staleness comparison, in nanoseconds.

    Falls back to the access time when the platform reports no modification
    time, and returns None when neither is available.
    """
    for attr in ("st_mtime_ns", "st_atime_ns"):
        value = getattr(stats, attr, None)
        if value is not None:
            return value
    return None


def source_time(path: Path) -> Optional[int]:
    """Comparison time of ``path``, or None if it cannot be stat'd."""
    try:
        return comparison_time(path.stat())
    except OSError:
        return None


@lru_cache(maxsize=None)
def _report_missing_timestamps(path: str) -> None:
    logger.error(
        f"Filesystem reports neither modification nor access time for {path}; "
        "treating it as up to date"
    )


def is_stale(source: Path, destination: Path) -> bool:
    """
    Check whether ``destination`` must be regenerated from ``source``.

    Args:
        source: File in the staging tree
        destination: Its mirrored output path

    Returns:
        True if the destination is missing, the source cannot be stat'd, or
        the source is strictly newer than the destination
    """
    try:
        source_stats = source.stat()
        destination_stats = destination.stat()
    except OSError:
        return True

    source_ts = comparison_time(source_stats)
    destination_ts = comparison_time(destination_stats)
    if source_ts is None or destination_ts is None:
        _report_missing_timestamps(str(source))
        return False

    return source_ts > destination_ts
