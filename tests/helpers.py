import os
import threading
from pathlib import Path

from domains.asset_processing.errors import TranscodeError, UnsupportedFormatError
from domains.asset_processing.transcode import MeshFormat


def set_mtime(path: Path, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


class FakeTranscoder:
    """Transcoder double: the 'graph' is the input bytes."""

    def __init__(self, fail_decode: bool = False, fail_encode: bool = False):
        self.fail_decode = fail_decode
        self.fail_encode = fail_encode
        self.decoded: list[Path] = []

    def decode(self, data, fmt, source=None):
        if fmt is MeshFormat.GLXF:
            raise UnsupportedFormatError("glXF scene collections are not supported", source)
        if self.fail_decode:
            raise TranscodeError("corrupt input", source)
        self.decoded.append(source)
        return (fmt, data)

    def encode(self, graph):
        if self.fail_encode:
            raise TranscodeError("export failed")
        fmt, data = graph
        return b"GLB:" + data


class BlockingTranscoder(FakeTranscoder):
    """Holds every decode until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def decode(self, data, fmt, source=None):
        self.started.set()
        self.release.wait(timeout=10)
        return super().decode(data, fmt, source)
