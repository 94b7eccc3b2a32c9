"""
Mesh transcode capability.

Decodes a mesh container into an in-memory scene graph and encodes that graph
into the canonical output container. The trimesh implementation handles
binary glTF (.glb) and JSON glTF (.gltf); glTF scene collections (.glxf) are
recognised but not supported.
"""

import io
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

import trimesh
from trimesh.exchange.gltf import export_glb, export_gltf
from trimesh.resolvers import FilePathResolver
from loguru import logger

from app.utils.config import MeshStorage
from domains.asset_processing.errors import TranscodeError, UnsupportedFormatError


class MeshFormat(str, Enum):
    """Mesh container variants accepted as input."""

    GLB = "glb"
    GLTF = "gltf"
    GLXF = "glxf"

    @classmethod
    def from_extension(cls, ext: str) -> "MeshFormat":
        try:
            return cls(ext.lower())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise UnsupportedFormatError(
                f"No mesh format for extension '{ext}'. Valid mesh extensions: [{valid}]"
            ) from None


class Transcoder(Protocol):
    """Decode/encode interface consumed by the mesh processor."""

    def decode(self, data: bytes, fmt: MeshFormat, source: Optional[Path] = None) -> Any:
        ...

    def encode(self, graph: Any) -> bytes:
        ...


class TrimeshTranscoder:
    """Transcoder backed by trimesh scenes."""

    def __init__(self, storage: MeshStorage = MeshStorage.GLB):
        self.storage = storage

    def decode(self, data: bytes, fmt: MeshFormat, source: Optional[Path] = None) -> trimesh.Scene:
        """
        Decode container bytes into a scene.

        Args:
            data: Raw container bytes
            fmt: Input container format
            source: Original file path, used to resolve external glTF buffers

        Returns:
            Decoded trimesh scene
        """
        if fmt is MeshFormat.GLXF:
            raise UnsupportedFormatError("glXF scene collections are not supported", source)

        resolver = None
        if source is not None:
            resolver = FilePathResolver(source)

        try:
            scene = trimesh.load(
                io.BytesIO(data),
                file_type=fmt.value,
                resolver=resolver,
                force="scene",
            )
        except Exception as e:
            raise TranscodeError(f"{fmt.value.upper()} import error: {e}", source) from e

        if not isinstance(scene, trimesh.Scene):
            raise TranscodeError(f"{fmt.value.upper()} import produced no scene", source)

        logger.debug(f"Decoded {fmt.value} scene with {len(scene.geometry)} geometries")
        return scene

    def encode(self, graph: trimesh.Scene) -> bytes:
        """Encode ``graph`` into the configured canonical container."""
        try:
            if self.storage is MeshStorage.GLTF:
                files = export_gltf(graph, embed_buffers=True)
                return files["model.gltf"]
            return export_glb(graph)
        except Exception as e:
            raise TranscodeError(f"{self.storage.value.upper()} export error: {e}") from e
