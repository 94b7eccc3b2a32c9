"""Mapping from staging paths to their mirrored output paths."""

from pathlib import Path
from typing import Optional


def mirror_path(source: Path, source_root: Path, destination_root: Path) -> Optional[Path]:
    """
    Replace ``source_root`` with ``destination_root`` in ``source``.

    Args:
        source: Path inside the staging tree
        source_root: Staging tree root
        destination_root: Output tree root

    Returns:
        Mirrored path, or None if ``source`` is not under ``source_root``
    """
    try:
        relative = source.relative_to(source_root)
    except ValueError:
        return None
    return destination_root / relative


def with_canonical_suffix(path: Path, extension: str) -> Path:
    """Force ``path`` to end in ``.extension``; extensionless paths gain one."""
    return path.with_suffix(f".{extension}")


def destination_for(source: Path, kind, source_root: Path, destination_root: Path) -> Optional[Path]:
    """Destination of ``source`` under the rule of processor ``kind``."""
    return kind.destination_for(source, source_root, destination_root)
