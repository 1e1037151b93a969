"""
core/progress.py
Attempt counter for one scan, pushing ScanProgress snapshots to a callback at
a bounded cadence.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from core.models import ScanProgress
from core.timing import RateMeter
from utils.constants import PROGRESS_INTERVAL_S
from utils.logger import get_logger

log = get_logger("portprobe.progress")

ProgressCallback = Callable[[ScanProgress], None]


class ProgressTracker:
    """
    Monotonic ``attempted`` counter. ``advance()`` notifies the callback at
    most once per ``interval`` seconds; the final item always notifies.
    """

    def __init__(
        self,
        total: int,
        callback: Optional[ProgressCallback] = None,
        interval: float = PROGRESS_INTERVAL_S,
    ):
        self.total = total
        self._cb = callback
        self._interval = interval
        self._lock = threading.Lock()
        self._attempted = 0
        self._last_push: Optional[float] = None
        self.rate = RateMeter()

    @property
    def attempted(self) -> int:
        with self._lock:
            return self._attempted

    def snapshot(self) -> ScanProgress:
        with self._lock:
            return ScanProgress(self._attempted, self.total, self.rate.current_rate())

    def advance(self) -> None:
        self.rate.update()
        now = time.monotonic()
        with self._lock:
            self._attempted += 1
            snap = ScanProgress(self._attempted, self.total, self.rate.current_rate())
            due = (
                self._attempted >= self.total
                or self._last_push is None
                or now - self._last_push >= self._interval
            )
            if due:
                self._last_push = now
        if due:
            self._push(snap)

    def _push(self, snap: ScanProgress) -> None:
        if self._cb is None:
            return
        try:
            self._cb(snap)
        except Exception:
            # renderer errors are logged, never raised into the scan
            log.exception("Progress callback failed")
