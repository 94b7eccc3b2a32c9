"""Raw passthrough: output is an exact copy of the staging file."""

from app.utils.config import Settings
from domains.asset_processing.errors import ProcessingError
from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.work import WorkItem


class RawProcessor(ProcessorKind):
    name = "raw"

    def extensions(self, settings: Settings) -> list[str]:
        return settings.extensions.raw

    def execute(self, item: WorkItem, settings: Settings) -> bytes:
        try:
            return item.source.read_bytes()
        except OSError as e:
            raise ProcessingError(f"Failed to read source file: {e}", item.source) from e
