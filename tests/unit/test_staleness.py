from types import SimpleNamespace

from domains.asset_processing import staleness
from domains.asset_processing.staleness import comparison_time, is_stale
from tests.helpers import set_mtime

T0 = 1_700_000_000_000_000_000


def _pair(tmp_path, source_ns, dest_ns):
    source = tmp_path / "a.png"
    dest = tmp_path / "out.png"
    source.write_bytes(b"src")
    dest.write_bytes(b"dst")
    set_mtime(source, source_ns)
    set_mtime(dest, dest_ns)
    return source, dest


def test_missing_destination_is_stale(tmp_path):
    source = tmp_path / "a.png"
    source.write_bytes(b"src")

    assert is_stale(source, tmp_path / "missing.png") is True


def test_missing_source_is_stale(tmp_path):
    dest = tmp_path / "out.png"
    dest.write_bytes(b"dst")

    assert is_stale(tmp_path / "missing.png", dest) is True


def test_newer_source_is_stale(tmp_path):
    source, dest = _pair(tmp_path, T0 + 1, T0)
    assert is_stale(source, dest) is True


def test_equal_timestamps_are_fresh(tmp_path):
    source, dest = _pair(tmp_path, T0, T0)
    assert is_stale(source, dest) is False


def test_older_source_is_fresh(tmp_path):
    source, dest = _pair(tmp_path, T0, T0 + 5_000_000_000)
    assert is_stale(source, dest) is False


def test_comparison_time_falls_back_to_access_time():
    assert comparison_time(SimpleNamespace(st_mtime_ns=10, st_atime_ns=20)) == 10
    assert comparison_time(SimpleNamespace(st_mtime_ns=None, st_atime_ns=20)) == 20
    assert comparison_time(SimpleNamespace()) is None


def test_missing_timestamps_are_not_stale(tmp_path, monkeypatch):
    source, dest = _pair(tmp_path, T0 + 1, T0)
    monkeypatch.setattr(staleness, "comparison_time", lambda stats: None)

    assert is_stale(source, dest) is False
