"""Shared interface for processor kinds."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from app.utils.config import Settings
from domains.asset_processing.paths import mirror_path
from domains.asset_processing.work import WorkItem


class ProcessorKind(ABC):
    """
    A file-type handler owning an extension set and a transform.

    Subclasses read their extension list from the settings snapshot and
    produce the destination bytes for a work item. Writing the bytes and
    retiring the item is left to the executor.
    """

    name: str = ""

    @abstractmethod
    def extensions(self, settings: Settings) -> list[str]:
        """Configured extensions for this kind (lowercase, no dot)."""

    def matches(self, ext: Optional[str], settings: Settings) -> bool:
        """Check whether this kind claims files with extension ``ext``."""
        if not ext:
            return False
        return ext.lower() in self.extensions(settings)

    def destination_for(self, source: Path, source_root: Path, destination_root: Path) -> Optional[Path]:
        """Mirrored output path; extension unchanged unless overridden."""
        return mirror_path(source, source_root, destination_root)

    @abstractmethod
    def execute(self, item: WorkItem, settings: Settings) -> bytes:
        """
        Transform ``item.source`` into destination bytes.

        Raises:
            ProcessingError: The item cannot be processed
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
