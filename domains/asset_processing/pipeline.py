"""
Asset pipeline orchestrator.

Owns the in-flight set and drives scan ticks on a repeating interval timer.
Execution runs on per-kind worker pools, so a tick never waits for earlier
items to finish; items still in flight are simply not queued again.
"""

import threading
import time
from typing import Callable, Optional

from loguru import logger

from app.utils.config import Settings
from domains.asset_processing.executor import ProcessingExecutor
from domains.asset_processing.processors.registry import ProcessorRegistry, build_default_registry
from domains.asset_processing.scanner import ScanReport, StaleFileScanner
from domains.asset_processing.transcode import Transcoder
from domains.asset_processing.work import InFlightTracker


class IntervalTimer:
    """Repeating timer that fires once per elapsed interval."""

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self.clock = clock
        self._last_fire: Optional[float] = None

    def ready(self) -> bool:
        """True if the interval has elapsed since the last fire; resets it."""
        now = self.clock()
        if self._last_fire is not None and now - self._last_fire < self.interval:
            return False
        self._last_fire = now
        return True

    def remaining(self) -> float:
        """Seconds until the next fire."""
        if self._last_fire is None:
            return 0.0
        return max(self.interval - (self.clock() - self._last_fire), 0.0)


class AssetPipeline:
    """Scan-and-dispatch loop for one staging tree."""

    def __init__(
        self,
        settings: Settings,
        registry: Optional[ProcessorRegistry] = None,
        transcoder: Optional[Transcoder] = None,
    ):
        """
        Initialize asset pipeline.

        Args:
            settings: Settings snapshot
            registry: Processor kinds, raw/texture/mesh by default
            transcoder: Mesh transcode capability for the default registry
        """
        self.settings = settings
        self.registry = registry or build_default_registry(settings, transcoder)
        self.tracker = InFlightTracker()
        self.scanner = StaleFileScanner(settings, self.registry, self.tracker)
        self.executor = ProcessingExecutor(settings, self.registry, self.tracker)
        self.timer = IntervalTimer(settings.file_watching_rate_seconds)
        self.ticks = 0

        logger.info(
            f"Asset pipeline initialized: {settings.source_dir} -> {settings.output_dir} "
            f"(kinds: {', '.join(self.registry.names())})"
        )

    def tick(self) -> ScanReport:
        """Scan once and dispatch the newly queued items."""
        report = self.scanner.scan()
        self.executor.dispatch(report.items)
        self.ticks += 1
        return report

    def run_once(self) -> ScanReport:
        """Scan once and wait for every dispatched item to finish."""
        report = self.tick()
        self.executor.wait()
        return report

    def run_forever(self, stop_event: threading.Event) -> None:
        """
        Tick every poll interval until ``stop_event`` is set.

        Args:
            stop_event: Set from a signal handler or another thread to stop
        """
        logger.info(f"Watching {self.settings.source_dir} every {self.timer.interval}s")
        try:
            while not stop_event.is_set():
                if self.timer.ready():
                    try:
                        self.tick()
                    except Exception as e:
                        logger.exception(f"Scan tick failed: {e}")
                stop_event.wait(self.timer.remaining())
        finally:
            logger.info("Waiting for in-flight items to finish...")
            self.executor.shutdown(wait=True)
            logger.info("Asset pipeline stopped")

    def close(self) -> None:
        self.executor.shutdown(wait=True)
