"""
Processor registry.

Routes a staging file to exactly one processor kind by its lowercase
extension. Kinds are checked in registration order and the first match
wins, so overlapping extension lists resolve to the earlier kind.
"""

from pathlib import Path
from typing import Iterable, Iterator, Optional

from loguru import logger

from app.utils.config import Settings
from app.utils.helpers import get_file_extension
from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.processors.mesh import MeshProcessor
from domains.asset_processing.processors.raw import RawProcessor
from domains.asset_processing.processors.texture import TextureProcessor
from domains.asset_processing.transcode import Transcoder


class ProcessorRegistry:
    """Ordered, closed set of processor kinds."""

    def __init__(self, settings: Settings, kinds: Iterable[ProcessorKind]):
        self.settings = settings
        self._kinds: list[ProcessorKind] = []
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ProcessorKind) -> None:
        """Append ``kind`` at the lowest priority."""
        if any(existing.name == kind.name for existing in self._kinds):
            raise ValueError(f"Processor kind already registered: {kind.name}")

        overlap = [
            ext
            for existing in self._kinds
            for ext in kind.extensions(self.settings)
            if ext in existing.extensions(self.settings)
        ]
        if overlap:
            logger.warning(
                f"Extensions {overlap} of '{kind.name}' are already claimed by an earlier kind"
            )

        self._kinds.append(kind)

    def classify(self, path: Path) -> Optional[ProcessorKind]:
        """
        Select the processor kind for ``path``.

        Args:
            path: Staging file path

        Returns:
            First kind claiming the file's extension, or None
        """
        ext = get_file_extension(path)
        if ext is None:
            return None
        for kind in self._kinds:
            if kind.matches(ext, self.settings):
                return kind
        return None

    def get(self, name: str) -> ProcessorKind:
        for kind in self._kinds:
            if kind.name == name:
                return kind
        raise KeyError(name)

    def names(self) -> list[str]:
        return [kind.name for kind in self._kinds]

    def __iter__(self) -> Iterator[ProcessorKind]:
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)


def build_default_registry(settings: Settings, transcoder: Optional[Transcoder] = None) -> ProcessorRegistry:
    """Registry with raw, texture and mesh kinds in priority order."""
    return ProcessorRegistry(
        settings,
        [
            RawProcessor(),
            TextureProcessor(),
            MeshProcessor(settings, transcoder),
        ],
    )
