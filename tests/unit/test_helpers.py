from pathlib import Path

import pytest

from app.utils.helpers import format_duration, get_file_extension, write_bytes_atomic


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0s"),
        (0.0421, "42ms"),
        (1.5, "1s 500ms"),
        (75.5, "1m 15s 500ms"),
        (3600, "1h"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_get_file_extension():
    assert get_file_extension(Path("a/Model.GLB")) == "glb"
    assert get_file_extension(Path("archive.tar.gz")) == "gz"
    assert get_file_extension(Path("Makefile")) is None
    assert get_file_extension(Path(".hidden")) is None


def test_write_bytes_atomic_creates_parents_and_replaces(tmp_path):
    target = tmp_path / "nested" / "dir" / "file.bin"

    write_bytes_atomic(target, b"first")
    write_bytes_atomic(target, b"second")

    assert target.read_bytes() == b"second"
    assert [p.name for p in target.parent.iterdir()] == ["file.bin"]
