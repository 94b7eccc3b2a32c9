"""
Asset Processors

One processor kind per file type, checked in this priority order:
- raw.py - Byte-for-byte copy into the output tree
- texture.py - Image re-encode with optional downscale
- mesh.py - Mesh transcode into the canonical container
- registry.py - Ordered routing from file extension to kind
"""

from domains.asset_processing.processors.base import ProcessorKind
from domains.asset_processing.processors.mesh import MeshProcessor
from domains.asset_processing.processors.raw import RawProcessor
from domains.asset_processing.processors.registry import ProcessorRegistry, build_default_registry
from domains.asset_processing.processors.texture import TextureProcessor

__all__ = [
    "MeshProcessor",
    "ProcessorKind",
    "ProcessorRegistry",
    "RawProcessor",
    "TextureProcessor",
    "build_default_registry",
]
