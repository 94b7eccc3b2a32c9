"""
Processor execution units.

Each processor kind gets its own execution unit with a private worker pool,
so a slow or hung transform only holds up items of that kind. Items are
retired once they finish, successfully or not. A failed item therefore
becomes eligible again on the next tick and is retried until the cause
(a locked file, a corrupt export) clears.
"""

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional

from loguru import logger

from app.utils.config import Settings
from app.utils.helpers import format_duration, write_bytes_atomic
from domains.asset_processing.errors import ProcessingError
from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.processors.registry import ProcessorRegistry
from domains.asset_processing.work import InFlightTracker, WorkItem


class ExecutionUnit:
    """Runs the work items of a single processor kind."""

    def __init__(self, kind: ProcessorKind, settings: Settings, tracker: InFlightTracker, workers: int = 0):
        """
        Initialize execution unit.

        Args:
            kind: Processor kind whose items this unit runs
            settings: Settings snapshot passed to the kind
            tracker: Shared in-flight set
            workers: Worker threads, 0 runs items inline on submit
        """
        self.kind = kind
        self.settings = settings
        self.tracker = tracker
        self._pool: Optional[ThreadPoolExecutor] = None
        if workers > 0:
            self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"asset-{kind.name}")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()

        self.completed = 0
        self.failed = 0

    def submit(self, item: WorkItem) -> None:
        """Run ``item`` now (inline) or schedule it on the worker pool."""
        if item.kind != self.kind.name:
            raise ValueError(f"Work item for '{item.kind}' submitted to '{self.kind.name}' unit")

        if self._pool is None:
            self.run(item)
            return

        future = self._pool.submit(self.run, item)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def run(self, item: WorkItem) -> bool:
        """
        Transform and write a single item, then retire it.

        Args:
            item: Work item tagged with this unit's kind

        Returns:
            True if the destination was written
        """
        try:
            data = self.kind.execute(item, self.settings)
            write_bytes_atomic(item.destination, data)
            self._stamp(item)
        except ProcessingError as e:
            self._count(failed=True)
            logger.error(f"Failed to process {item.source} ({self.kind.name}): {e}")
            return False
        except Exception as e:
            self._count(failed=True)
            logger.exception(f"Unexpected error processing {item.source} ({self.kind.name}): {e}")
            return False
        finally:
            self.tracker.retire(item.source)

        self._count(failed=False)
        logger.info(
            f"Processed {item.source} => {item.destination} in {format_duration(item.elapsed())}"
        )
        return True

    def _stamp(self, item: WorkItem) -> None:
        """
        Give the output the source time it was built from.

        Edits made while the item was running then still count as newer. An
        output that cannot be stamped is removed, so the next tick retries it.
        """
        if item.source_mtime_ns is None:
            return
        try:
            os.utime(item.destination, ns=(item.source_mtime_ns, item.source_mtime_ns))
        except OSError as e:
            item.destination.unlink(missing_ok=True)
            raise ProcessingError(f"Failed to set output modification time: {e}", item.source) from e

    def _count(self, failed: bool) -> None:
        with self._lock:
            if failed:
                self.failed += 1
            else:
                self.completed += 1

    def wait(self) -> None:
        """Block until every submitted item has finished."""
        while True:
            with self._lock:
                futures = list(self._pending)
            if not futures:
                return
            for future in futures:
                future.result()

    def shutdown(self, wait: bool = True) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=wait)


class ProcessingExecutor:
    """Dispatches work items to the execution unit of their kind."""

    def __init__(self, settings: Settings, registry: ProcessorRegistry, tracker: InFlightTracker):
        self.tracker = tracker
        self.units: dict[str, ExecutionUnit] = {
            kind.name: ExecutionUnit(kind, settings, tracker, settings.worker_threads)
            for kind in registry
        }

    def dispatch(self, items: Iterable[WorkItem]) -> None:
        """Hand each item to its unit; items of unknown kinds are dropped."""
        for item in items:
            unit = self.units.get(item.kind)
            if unit is None:
                logger.error(f"No execution unit for kind '{item.kind}', dropping {item.source}")
                self.tracker.retire(item.source)
                continue
            unit.submit(item)

    def wait(self) -> None:
        for unit in self.units.values():
            unit.wait()

    def shutdown(self, wait: bool = True) -> None:
        for unit in self.units.values():
            unit.shutdown(wait=wait)
