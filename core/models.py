"""
core/models.py
Immutable value types shared by the prober, banner reader, scheduler and
aggregator.
"""

from __future__ import annotations

import ipaddress
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from utils.constants import PortState


# ─── Work items ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WorkItem:
    host: str
    port: int

    @property
    def sort_key(self) -> tuple:
        """Addresses numerically (v4 before v6), then hostnames, then port."""
        try:
            ip = ipaddress.ip_address(self.host)
        except ValueError:
            return (1, 0, 0, self.host, self.port)
        return (0, ip.version, int(ip), "", self.port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


# ─── Outcomes ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProbeOutcome:
    """Open / Closed / Filtered(reason) / Error(reason)."""

    state:  PortState
    reason: Optional[str] = None
    resource_exhausted: bool = field(default=False, compare=False)

    @classmethod
    def open(cls) -> "ProbeOutcome":
        return cls(PortState.OPEN)

    @classmethod
    def closed(cls) -> "ProbeOutcome":
        return cls(PortState.CLOSED)

    @classmethod
    def filtered(cls, reason: str) -> "ProbeOutcome":
        return cls(PortState.FILTERED, reason)

    @classmethod
    def error(cls, reason: str, resource_exhausted: bool = False) -> "ProbeOutcome":
        return cls(PortState.ERROR, reason, resource_exhausted)

    @property
    def is_open(self) -> bool:
        return self.state is PortState.OPEN

    def __str__(self) -> str:
        if self.reason:
            return f"{self.state.value}({self.reason})"
        return self.state.value


@dataclass(frozen=True)
class BannerResult:
    """
    ``attempted=False`` means banner reading never ran for the item;
    ``attempted=True, data=None`` means it ran and captured nothing.
    """

    attempted: bool = False
    data:      Optional[bytes] = None

    @property
    def text(self) -> Optional[str]:
        if not self.data:
            return None
        return self.data.decode("utf-8", errors="replace").strip() or None


BannerResult.NOT_ATTEMPTED = BannerResult()
BannerResult.EMPTY = BannerResult(attempted=True)


@dataclass(frozen=True)
class ScanResult:
    item:    WorkItem
    outcome: ProbeOutcome
    banner:  BannerResult = BannerResult.NOT_ATTEMPTED
    elapsed: float = 0.0    # seconds spent in the connect race

    @property
    def state(self) -> PortState:
        return self.outcome.state

    def to_record(self) -> dict:
        """Row shape shared by the JSON and TXT writers."""
        return {
            "host":       self.item.host,
            "port":       self.item.port,
            "state":      self.outcome.state.value,
            "banner":     self.banner.text,
            "elapsed_ms": round(self.elapsed * 1000, 1),
        }


@dataclass(frozen=True)
class ScanProgress:
    attempted: int
    total:     int
    rate:      float = 0.0  # attempts/s over the recent window

    @property
    def fraction(self) -> float:
        return self.attempted / self.total if self.total else 1.0


# ─── Report ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ScanReport:
    results:   Tuple[ScanResult, ...] = ()
    elapsed:   float = 0.0
    cancelled: bool = False

    def __iter__(self) -> Iterator[ScanResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> ScanResult:
        return self.results[index]

    def records(self) -> Iterator[dict]:
        for r in self.results:
            yield r.to_record()

    def counts(self) -> Dict[PortState, int]:
        tally = Counter(r.state for r in self.results)
        return {state: tally.get(state, 0) for state in PortState}

    def open_results(self) -> List[ScanResult]:
        return [r for r in self.results if r.outcome.is_open]

    def summary(self, target: str) -> dict:
        counts = self.counts()
        return {
            "target":         target,
            "scanned_ports":  len(self.results),
            "open_ports":     counts[PortState.OPEN],
            "closed_ports":   counts[PortState.CLOSED],
            "filtered_ports": counts[PortState.FILTERED],
            "error_ports":    counts[PortState.ERROR],
            "total_time_ms":  round(self.elapsed * 1000),
            "cancelled":      self.cancelled,
            "results":        list(self.records()),
        }
