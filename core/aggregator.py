"""
core/aggregator.py
Collects ScanResults in completion order and freezes them into a sorted
ScanReport once every enumerated item is accounted for.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, Iterable, List, Tuple

from core.models import BannerResult, ProbeOutcome, ScanReport, ScanResult, WorkItem
from utils.constants import STATE_RANK


class AggregatorError(RuntimeError):
    """finalize() called before all expected results were recorded."""


def _preference(result: ScanResult) -> Tuple[int, int]:
    return (STATE_RANK[result.state], 0 if result.banner.data else 1)


class ResultAggregator:
    """
    Thread-safe result buffer for one scan.

    ``expected`` is the enumerated item count; ``finalize()`` refuses to run
    until that many results (real or synthetic) have been recorded.
    """

    def __init__(self, expected: int):
        if expected < 0:
            raise ValueError(f"expected must be >= 0, got {expected}")
        self.expected = expected
        self._lock = threading.Lock()
        self._results: List[ScanResult] = []
        self._frozen = False

    def record(self, result: ScanResult) -> None:
        with self._lock:
            if self._frozen:
                raise AggregatorError(f"Report already finalized; late result for {result.item}")
            self._results.append(result)

    @property
    def recorded(self) -> int:
        with self._lock:
            return len(self._results)

    @property
    def complete(self) -> bool:
        return self.recorded >= self.expected

    def fill_missing(self, items: Iterable[WorkItem], outcome: ProbeOutcome) -> int:
        """
        Record a synthetic ``outcome`` for every enumerated item that has no
        result yet (multiset-aware for duplicate items). Returns the count added.
        """
        wanted = Counter(items)
        with self._lock:
            if self._frozen:
                raise AggregatorError("Report already finalized")
            wanted.subtract(r.item for r in self._results)
            added = 0
            for item, missing in wanted.items():
                for _ in range(max(missing, 0)):
                    self._results.append(
                        ScanResult(item, outcome, BannerResult.NOT_ATTEMPTED, 0.0)
                    )
                    added += 1
            return added

    def finalize(self, elapsed: float = 0.0, cancelled: bool = False) -> ScanReport:
        """Sort by (host, port), keep one result per pair, freeze."""
        with self._lock:
            if len(self._results) < self.expected:
                raise AggregatorError(
                    f"finalize() with {len(self._results)}/{self.expected} results recorded"
                )
            self._frozen = True
            best: Dict[WorkItem, ScanResult] = {}
            for r in self._results:
                held = best.get(r.item)
                if held is None or _preference(r) < _preference(held):
                    best[r.item] = r

        ordered = sorted(best.values(), key=lambda r: r.item.sort_key)
        return ScanReport(results=tuple(ordered), elapsed=elapsed, cancelled=cancelled)
