"""Exceptions raised by processor kinds and the transcode capability."""

from pathlib import Path
from typing import Optional


class AssetPipelineError(Exception):
    """Base class for asset pipeline errors."""


class ProcessingError(AssetPipelineError):
    """A single work item could not be processed."""

    def __init__(self, message: str, source: Optional[Path] = None):
        super().__init__(message)
        self.source = source

    def __str__(self) -> str:
        message = super().__str__()
        if self.source is not None:
            return f"{message} [{self.source}]"
        return message


class TranscodeError(ProcessingError):
    """Mesh decode or encode failed."""


class UnsupportedFormatError(TranscodeError):
    """The transcode capability has no support for the input container."""
