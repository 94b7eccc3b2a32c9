#!/usr/bin/env python3
"""
Asset Pipeline - command line entry point.

Keeps an output tree in sync with a staging tree:
- Raw assets are copied verbatim
- Textures are re-encoded
- Meshes are transcoded into a single canonical container

Runs a single pass with ``--oneshot`` or polls until interrupted.
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from loguru import logger

from app.utils.config import DEFAULT_SOURCE_DIR, load_settings
from domains.asset_processing.pipeline import AssetPipeline

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Process stale assets from a staging tree into an output tree.",
    )
    parser.add_argument(
        "-o",
        "--oneshot",
        action="store_true",
        help="Run a single scan, wait for its items and exit.",
    )
    parser.add_argument(
        "--source",
        type=Path,
        default=DEFAULT_SOURCE_DIR,
        help="Staging tree holding config.toml and raw assets (default: ./assets-dev).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output tree (default: output_dir from settings, ./assets).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads per processor kind, 0 processes inline.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: log_level from settings, INFO).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)

    overrides = {}
    if args.output is not None:
        overrides["output_dir"] = args.output
    if args.workers is not None:
        overrides["worker_threads"] = args.workers
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    configure_logging(args.log_level or "INFO")
    settings = load_settings(args.source, **overrides)
    configure_logging(settings.log_level)

    pipeline = AssetPipeline(settings)

    if args.oneshot:
        try:
            report = pipeline.run_once()
        finally:
            pipeline.close()
        logger.info(f"Oneshot complete: {report.queued} queued, {len(report.unhandled)} unhandled")
        return 0

    stop_event = threading.Event()

    def _signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    pipeline.run_forever(stop_event)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
