"""
Stale file scanner for the Asset Processing domain.

Walks the staging tree on every tick, mirrors its directory structure into
the output tree and queues each stale file for the processor kind that
claims its extension. Files already in flight are never queued twice.
"""

import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from app.utils.config import Settings
from app.utils.helpers import normalise_path
from domains.asset_processing.paths import mirror_path
from domains.asset_processing.processors.registry import ProcessorRegistry
from domains.asset_processing.staleness import is_stale, source_time
from domains.asset_processing.work import InFlightTracker, WorkItem


@dataclass(slots=True)
class ScanReport:
    """Outcome of a single scan pass."""

    queued: int = 0
    previously_in_flight: int = 0
    unhandled: list[Path] = field(default_factory=list)
    items: list[WorkItem] = field(default_factory=list)

    @property
    def total_in_flight(self) -> int:
        return self.queued + self.previously_in_flight


def walk_source_tree(root: Path, exclude: Optional[Path] = None) -> Iterator[tuple[Path, bool]]:
    """
    Yield ``(path, is_directory)`` for every entry below ``root``.

    Depth-first, entries sorted by name, symbolic links followed. A link back
    to a directory on the current path (a loop) is not descended; other
    directories reached through several links are walked once per link.
    Entries that cannot be listed or stat'd are logged and skipped.

    Args:
        root: Directory to walk
        exclude: Single path to leave out of the walk
    """

    def _walk(directory: Path, ancestors: frozenset) -> Iterator[tuple[Path, bool]]:
        try:
            stats = directory.stat()
        except OSError as e:
            logger.error(f"Error encountered while checking for stale files: {e}")
            return

        key = (stats.st_dev, stats.st_ino)
        if key in ancestors:
            logger.warning(f"Skipping {directory}: symlink loop back to a parent directory")
            return
        ancestors = ancestors | {key}

        try:
            children = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.error(f"Error encountered while checking for stale files: {e}")
            return

        for child in children:
            if exclude is not None and child == exclude:
                continue
            try:
                mode = child.stat().st_mode
            except OSError as e:
                logger.error(f"Error encountered while checking for stale files: {e}")
                continue

            is_dir = stat.S_ISDIR(mode)
            if not is_dir and not stat.S_ISREG(mode):
                continue

            yield child, is_dir
            if is_dir:
                yield from _walk(child, ancestors)

    yield from _walk(root, frozenset())


class StaleFileScanner:
    """Queues stale staging files for processing."""

    def __init__(self, settings: Settings, registry: ProcessorRegistry, tracker: InFlightTracker):
        """
        Initialize scanner.

        Args:
            settings: Settings snapshot with the staging and output roots
            registry: Processor kinds used to classify files
            tracker: Shared in-flight set
        """
        self.settings = settings
        self.registry = registry
        self.tracker = tracker
        self.source_root = normalise_path(settings.source_dir)
        self.destination_root = normalise_path(settings.output_dir)
        self.config_path = self.source_root / settings.config_file_name

    def mirror_directory(self, directory: Path) -> None:
        """Create the output counterpart of ``directory`` if it is missing."""
        mirrored = mirror_path(directory, self.source_root, self.destination_root)
        if mirrored is None:
            logger.error(f"Directory {directory} is outside {self.source_root}")
            return
        try:
            mirrored.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to mirror directory {directory}: {e}")

    def scan(self) -> ScanReport:
        """
        Run one scan pass.

        Returns:
            ScanReport with the newly queued items
        """
        in_flight = self.tracker.snapshot()
        report = ScanReport(previously_in_flight=len(in_flight))

        if not self.source_root.is_dir():
            logger.warning(f"Staging directory {self.source_root} does not exist")
            return report

        self.mirror_directory(self.source_root)

        for path, is_dir in walk_source_tree(self.source_root, exclude=self.config_path):
            if is_dir:
                self.mirror_directory(path)
                continue

            kind = self.registry.classify(path)
            if kind is None:
                report.unhandled.append(path)
                continue

            if path in in_flight:
                continue

            destination = kind.destination_for(path, self.source_root, self.destination_root)
            if destination is None:
                logger.error(f"Failed to map {path} outside {self.source_root} to the output tree")
                continue

            if not is_stale(path, destination):
                continue

            item = WorkItem(
                source=path,
                destination=destination,
                kind=kind.name,
                source_mtime_ns=source_time(path),
            )
            if not self.tracker.claim(item):
                continue

            report.items.append(item)
            report.queued += 1
            logger.debug(f"Queued for processing: {path}")

        self._log_report(report)
        return report

    def _log_report(self, report: ScanReport) -> None:
        if report.queued:
            logger.info(
                f"Queued {report.queued} files for processing. "
                f"{report.previously_in_flight} files already queued. "
                f"{report.total_in_flight} total files in processing"
            )
        if report.unhandled:
            listing = "\n".join(f"  {path}" for path in report.unhandled)
            logger.debug(f"Unhandled files:\n{listing}")
