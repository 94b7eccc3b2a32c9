"""
Helper utilities for the asset pipeline.

Common functions used across domains.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional


def normalise_path(path: Path) -> Path:
    """Return a resolved version of ``path`` without forcing existence."""
    try:
        return path.expanduser().resolve()
    except FileNotFoundError:
        return path.expanduser().absolute()


def get_file_extension(path: Path) -> Optional[str]:
    """Get lowercase file extension without dot, or None if there is none."""
    ext = path.suffix.lstrip('.')
    return ext.lower() if ext else None


def format_duration(seconds: float) -> str:
    """
    Format a duration the way humans read it.

    Examples:
        0.0421 -> "42ms"
        75.5   -> "1m 15s 500ms"

    Args:
        seconds: Duration in seconds

    Returns:
        Human-readable duration string
    """
    total_ms = max(int(round(seconds * 1000)), 0)
    if total_ms == 0:
        return "0s"

    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)

    parts = []
    for value, unit in ((hours, "h"), (minutes, "m"), (secs, "s"), (ms, "ms")):
        if value:
            parts.append(f"{value}{unit}")
    return " ".join(parts)


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``path`` through a temporary sibling file.

    Readers never observe a half-written file: the temporary file is
    renamed over ``path`` only after it was fully written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
