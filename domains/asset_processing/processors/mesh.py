"""Mesh processor: every input container becomes the canonical container."""

from pathlib import Path
from typing import Optional

from loguru import logger

from app.utils.config import Settings
from app.utils.helpers import get_file_extension
from domains.asset_processing.errors import ProcessingError
from domains.asset_processing.paths import mirror_path, with_canonical_suffix
from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.transcode import MeshFormat, Transcoder, TrimeshTranscoder
from domains.asset_processing.work import WorkItem


class MeshProcessor(ProcessorKind):
    name = "mesh"

    def __init__(self, settings: Settings, transcoder: Optional[Transcoder] = None):
        """
        Initialize mesh processor.

        Args:
            settings: Settings snapshot, selects the canonical container
            transcoder: Decode/encode capability, trimesh by default
        """
        self.storage = settings.meshes.storage
        self.transcoder = transcoder or TrimeshTranscoder(self.storage)

    def extensions(self, settings: Settings) -> list[str]:
        return settings.extensions.mesh

    def destination_for(self, source: Path, source_root: Path, destination_root: Path) -> Optional[Path]:
        mirrored = mirror_path(source, source_root, destination_root)
        if mirrored is None:
            return None
        return with_canonical_suffix(mirrored, self.storage.value)

    def execute(self, item: WorkItem, settings: Settings) -> bytes:
        fmt = MeshFormat.from_extension(get_file_extension(item.source) or "")

        try:
            data = item.source.read_bytes()
        except OSError as e:
            raise ProcessingError(f"Failed to read mesh: {e}", item.source) from e

        graph = self.transcoder.decode(data, fmt, item.source)
        output = self.transcoder.encode(graph)
        logger.debug(f"Mesh {item.source} => {item.destination}")
        return output
