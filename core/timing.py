"""
core/timing.py
Clock helpers for the engine.

  Deadline   – absolute monotonic deadline with a "time left" view, used to
               split one banner budget across several reads.
  RateMeter  – sliding-window attempt rate for progress output.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Optional


# ─── Deadline ─────────────────────────────────────────────────────────────────

class Deadline:
    """Fixed point in monotonic time, ``budget_s`` seconds from creation."""

    __slots__ = ("_at",)

    def __init__(self, budget_s: float):
        self._at = time.monotonic() + budget_s

    def remaining(self, cap: Optional[float] = None) -> float:
        """Seconds left (never negative), optionally capped."""
        left = max(0.0, self._at - time.monotonic())
        return min(left, cap) if cap is not None else left

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self._at


# ─── Scan Rate Meter ──────────────────────────────────────────────────────────

class RateMeter:
    """
    Attempts per second over a sliding window.
    Thread-safe.
    """

    def __init__(self, window_s: float = 5.0):
        self._window = window_s
        self._lock   = threading.Lock()
        self._stamps: deque[float] = deque()
        self._start  = time.monotonic()

    def update(self) -> None:
        now = time.monotonic()
        with self._lock:
            self._stamps.append(now)
            self._prune(now)

    def current_rate(self) -> float:
        """Items/second in sliding window (shorter while the scan is young)."""
        now = time.monotonic()
        with self._lock:
            self._prune(now)
            span = min(self._window, now - self._start)
            return len(self._stamps) / span if span > 0 else 0.0

    def _prune(self, now: float) -> None:
        cutoff = now - self._window
        while self._stamps and self._stamps[0] < cutoff:
            self._stamps.popleft()
