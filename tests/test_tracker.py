from __future__ import annotations

import pytest

from partition_bench.seed.tracker import DEFAULT_TRACKER_THRESHOLD, DuplicateTracker


def test_record_then_contains() -> None:
    tracker = DuplicateTracker()
    tracker.record((3, 7))

    assert tracker.contains((3, 7))
    assert (3, 7) in tracker
    assert not tracker.contains((7, 3))


def test_clear_forgets_recorded_keys() -> None:
    """
    < Uniqueness is local to the current window >
    1. Record a key.
    2. Clear the tracker.
    3. The same key is no longer known, so it may be emitted again.
    """
    tracker = DuplicateTracker()
    tracker.record((1, 2))
    tracker.clear()

    assert not tracker.contains((1, 2))
    assert len(tracker) == 0
    assert tracker.resets == 1


def test_maybe_reset_only_fires_past_threshold() -> None:
    tracker = DuplicateTracker(threshold=3)
    for i in range(3):
        tracker.record((i, i))

    assert tracker.maybe_reset() is False
    assert len(tracker) == 3

    tracker.record((9, 9))
    assert tracker.maybe_reset() is True
    assert len(tracker) == 0
    assert not tracker.contains((0, 0))


def test_default_threshold() -> None:
    assert DuplicateTracker().threshold == DEFAULT_TRACKER_THRESHOLD == 100_000


def test_threshold_must_be_positive() -> None:
    with pytest.raises(ValueError, match=r'threshold must be >= 1\.'):
        DuplicateTracker(threshold=0)
