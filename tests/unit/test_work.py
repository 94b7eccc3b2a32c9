import threading
from pathlib import Path

from domains.asset_processing.pipeline import IntervalTimer
from domains.asset_processing.work import InFlightTracker, WorkItem


def _item(name: str, kind: str = "raw") -> WorkItem:
    return WorkItem(source=Path("/stage") / name, destination=Path("/out") / name, kind=kind)


def test_claim_rejects_second_item_for_same_source():
    tracker = InFlightTracker()

    held = _item("a.png")
    assert tracker.claim(held) is True
    assert tracker.claim(_item("a.png", kind="texture")) is False
    assert len(tracker) == 1
    assert tracker.retire(held.source).kind == "raw"


def test_retire_releases_source():
    tracker = InFlightTracker()
    item = _item("a.png")
    tracker.claim(item)

    assert tracker.retire(item.source) is item
    assert tracker.retire(item.source) is None
    assert item.source not in tracker.snapshot()
    assert tracker.claim(_item("a.png")) is True


def test_snapshot_is_a_copy():
    tracker = InFlightTracker()
    tracker.claim(_item("a.png"))
    snapshot = tracker.snapshot()

    tracker.claim(_item("b.png"))

    assert snapshot == {Path("/stage/a.png")}
    assert tracker.snapshot() == {Path("/stage/a.png"), Path("/stage/b.png")}


def test_concurrent_claims_admit_one_item():
    tracker = InFlightTracker()
    results = []
    barrier = threading.Barrier(8)

    def _claim():
        barrier.wait()
        results.append(tracker.claim(_item("a.png")))

    threads = [threading.Thread(target=_claim) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert len(tracker) == 1


def test_interval_timer_fires_once_per_interval():
    now = [100.0]
    timer = IntervalTimer(5.0, clock=lambda: now[0])

    assert timer.ready() is True
    assert timer.ready() is False
    assert timer.remaining() == 5.0

    now[0] += 3.0
    assert timer.ready() is False

    now[0] += 2.0
    assert timer.ready() is True
    assert timer.remaining() == 5.0


def test_work_item_elapsed_is_non_negative():
    assert _item("a.png").elapsed() >= 0
