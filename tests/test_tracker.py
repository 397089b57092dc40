from __future__ import annotations

import pytest

from spew.tracker import CycleTracker


def test_enter_leave():
    tracker = CycleTracker()
    assert tracker.enter(1)
    assert not tracker.enter(1)
    assert 1 in tracker
    assert len(tracker) == 1
    tracker.leave(1)
    assert 1 not in tracker
    assert tracker.enter(1)


def test_visiting_nested():
    tracker = CycleTracker()
    with tracker.visiting(1) as outer:
        assert outer
        with tracker.visiting(1) as inner:
            assert not inner
        # The inner scope didn't own the address: it's still in progress.
        assert 1 in tracker
        with tracker.visiting(2) as other:
            assert other
            assert len(tracker) == 2
    assert len(tracker) == 0


def test_visiting_releases_on_error():
    tracker = CycleTracker()
    with pytest.raises(ValueError):
        with tracker.visiting("addr"):
            raise ValueError()
    assert "addr" not in tracker
