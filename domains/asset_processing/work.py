"""Work items and the in-flight set shared by the scanner and the executor."""

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True, slots=True)
class WorkItem:
    """A stale staging file claimed by exactly one processor kind."""

    source: Path
    destination: Path
    kind: str
    source_mtime_ns: Optional[int] = None
    queued_at: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        """Seconds since the item was queued."""
        return time.monotonic() - self.queued_at


class InFlightTracker:
    """
    Source paths with an un-retired work item.

    ``claim`` is an atomic check-and-insert, so a path is never held by two
    items at once even when the scanner overlaps with running executors.
    """

    def __init__(self):
        self._items: dict[Path, WorkItem] = {}
        self._lock = threading.Lock()

    def claim(self, item: WorkItem) -> bool:
        """Register ``item``; False if its source is already in flight."""
        with self._lock:
            if item.source in self._items:
                return False
            self._items[item.source] = item
            return True

    def retire(self, source: Path) -> Optional[WorkItem]:
        """Release ``source`` and return the item that held it."""
        with self._lock:
            return self._items.pop(source, None)

    def snapshot(self) -> frozenset[Path]:
        """Copy of the in-flight source paths."""
        with self._lock:
            return frozenset(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
