"""
tests/test_progress.py
ProgressTracker cadence and the timing helpers in core/timing.py.
Run: pytest tests/test_progress.py -v
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import threading
import time

import pytest
from core.progress import ProgressTracker
from core.timing import Deadline, RateMeter


class TestProgressTracker:

    def test_first_and_last_always_pushed(self):
        seen = []
        tracker = ProgressTracker(5, seen.append, interval=3600)
        for _ in range(5):
            tracker.advance()
        assert [s.attempted for s in seen] == [1, 5]
        assert seen[-1].fraction == 1.0

    def test_zero_interval_pushes_every_item(self):
        seen = []
        tracker = ProgressTracker(4, seen.append, interval=0)
        for _ in range(4):
            tracker.advance()
        assert [s.attempted for s in seen] == [1, 2, 3, 4]

    def test_snapshot_without_callback(self):
        tracker = ProgressTracker(10)
        time.sleep(0.01)
        tracker.advance()
        tracker.advance()
        snap = tracker.snapshot()
        assert (snap.attempted, snap.total) == (2, 10)
        assert snap.fraction == pytest.approx(0.2)
        assert snap.rate > 0

    def test_counter_is_thread_safe(self):
        tracker = ProgressTracker(4000, interval=0)
        threads = [threading.Thread(target=lambda: [tracker.advance() for _ in range(1000)])
                   for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert tracker.attempted == 4000

    def test_callback_error_is_contained(self):
        def boom(_):
            raise RuntimeError("terminal gone")

        tracker = ProgressTracker(2, boom, interval=0)
        tracker.advance()
        tracker.advance()
        assert tracker.attempted == 2

    def test_empty_scan_fraction(self):
        assert ProgressTracker(0).snapshot().fraction == 1.0


class TestTiming:

    def test_deadline_remaining_and_cap(self):
        d = Deadline(10.0)
        assert d.remaining(cap=0.5) == 0.5
        assert 9.0 < d.remaining() <= 10.0
        assert d.expired is False

    def test_deadline_expires(self):
        d = Deadline(0.01)
        time.sleep(0.02)
        assert d.expired
        assert d.remaining() == 0.0

    def test_rate_meter(self):
        meter = RateMeter(window_s=5.0)
        time.sleep(0.01)
        for _ in range(10):
            meter.update()
        assert meter.current_rate() > 0

    def test_rate_meter_forgets_old_attempts(self):
        meter = RateMeter(window_s=0.05)
        for _ in range(10):
            meter.update()
        time.sleep(0.1)
        assert meter.current_rate() == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
