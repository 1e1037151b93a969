"""
core/scanner_engine.py
Async TCP-connect scan scheduler:
  • asyncio.Semaphore admission control, one slot per in-flight item
  • items admitted in enumeration order, completed in any order
  • probe → optional banner read on the same slot → record → release
  • independent per-item deadlines (core/prober.py, core/banner.py)
  • rate-limited progress callback (core/progress.py)
  • whole-scan cancellation with a grace period and full accounting
  • No imports of reporting (clean layering)
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Iterable, List, Optional, Set

from core.aggregator import ResultAggregator
from core.banner import read_banner
from core.config import ScanConfig
from core.models import BannerResult, ProbeOutcome, ScanReport, ScanResult, WorkItem
from core.progress import ProgressCallback, ProgressTracker
from core.prober import Connection, ProbeAttempt, probe
from utils.constants import (
    CANCEL_GRACE_S, EXHAUSTION_BACKOFF_S, PROGRESS_INTERVAL_S, REASON_CANCELLED,
)
from utils.logger import get_logger

log = get_logger("portprobe.engine")

Prober = Callable[[WorkItem, float], Awaitable[ProbeAttempt]]
BannerReader = Callable[[Connection, float], Awaitable[BannerResult]]


class _ScanRun:
    """Mutable state of one ``scan()`` call; never shared between calls."""

    def __init__(self, concurrency: int, aggregator: ResultAggregator, progress: ProgressTracker):
        self.slots = asyncio.Semaphore(concurrency)
        self.idle = asyncio.Event()
        self.idle.set()
        self.in_flight = 0
        self.backoff_until = 0.0
        self.aggregator = aggregator
        self.progress = progress
        self.tasks: Set[asyncio.Task] = set()
        self.failure: Optional[BaseException] = None


class ScanEngine:
    """
    Bounded-concurrency TCP-connect scanner.

    ``scan()`` may run several times, also concurrently; each call gets its
    own slots. ``cancel()`` applies to every scan running at that moment.

    Layering contract:
      Imports only: core/*, utils/*
      Does NOT import: reporting
    """

    def __init__(
        self,
        config: ScanConfig,
        progress_cb: Optional[ProgressCallback] = None,
        *,
        prober: Prober = probe,
        banner_reader: BannerReader = read_banner,
        cancel_grace: float = CANCEL_GRACE_S,
        progress_interval: float = PROGRESS_INTERVAL_S,
    ):
        self.config = config
        self._cb = progress_cb
        self._probe = prober
        self._read_banner = banner_reader
        self._grace = cancel_grace
        self._progress_interval = progress_interval

        self._cancel = asyncio.Event()
        self._active = 0

    # ── Public API ────────────────────────────────────────────────────────────

    def cancel(self) -> None:
        """Stop admitting items and wind the running scans down."""
        if not self._cancel.is_set():
            log.warning("Scan cancellation requested")
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    async def scan(self, items: Iterable[WorkItem]) -> ScanReport:
        """
        Probe every item and return the sorted report.

        Every enumerated item yields exactly one result, including items
        that were never admitted because of cancellation.
        """
        work: List[WorkItem] = list(items)
        run = _ScanRun(
            self.config.concurrency,
            ResultAggregator(len(work)),
            ProgressTracker(len(work), self._cb, self._progress_interval),
        )

        log.debug(
            f"Scanning {len(work)} items, concurrency={self.config.concurrency}, "
            f"timeout={self.config.connect_timeout}s, "
            f"banner={'on' if self.config.banner_enabled else 'off'}"
        )
        self._active += 1
        t0 = time.monotonic()
        try:
            for item in work:
                if not await self._admit(run):
                    break
                run.in_flight += 1
                run.idle.clear()
                task = asyncio.ensure_future(self._run_item(run, item))
                run.tasks.add(task)
                task.add_done_callback(run.tasks.discard)

            await self._drain(run)
            if run.failure is not None:
                raise run.failure

            cancelled = self._cancel.is_set()
            if cancelled:
                added = run.aggregator.fill_missing(work, ProbeOutcome.error(REASON_CANCELLED))
                log.warning(f"Scan cancelled: {added} of {len(work)} items unresolved")
            return run.aggregator.finalize(elapsed=time.monotonic() - t0, cancelled=cancelled)
        finally:
            leftover = list(run.tasks)
            for t in leftover:
                t.cancel()
            if leftover:
                await asyncio.gather(*leftover, return_exceptions=True)
            self._active -= 1
            if self._active == 0:
                self._cancel.clear()

    # ── Admission ─────────────────────────────────────────────────────────────

    async def _admit(self, run: _ScanRun) -> bool:
        """Take one slot. False once the scan is cancelled or has failed."""
        if self._cancel.is_set() or run.failure is not None:
            return False

        if run.slots.locked():
            if not await self._acquire_or_cancel(run.slots):
                return False
        else:
            await run.slots.acquire()

        # backoff may have been set by the task whose release admitted us
        pause = run.backoff_until - time.monotonic()
        if pause > 0:
            log.debug(f"Backing off admissions for {pause:.2f}s")
            await self._wait_cancel(pause)

        if self._cancel.is_set() or run.failure is not None:
            run.slots.release()
            return False
        return True

    async def _acquire_or_cancel(self, slots: asyncio.Semaphore) -> bool:
        acquire = asyncio.ensure_future(slots.acquire())
        stop = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait({acquire, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not acquire.done():
                acquire.cancel()
            await asyncio.gather(acquire, stop, return_exceptions=True)

        return not acquire.cancelled() and acquire.exception() is None

    async def _wait_cancel(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self._cancel.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass

    # ── Per-item lifecycle ────────────────────────────────────────────────────

    async def _run_item(self, run: _ScanRun, item: WorkItem) -> None:
        """Slot is already held; released here exactly once."""
        t0 = time.monotonic()
        result: Optional[ScanResult] = None
        try:
            result = await self._scan_item(run, item)
        except asyncio.CancelledError:
            result = ScanResult(item, ProbeOutcome.error(REASON_CANCELLED),
                                BannerResult.NOT_ATTEMPTED, time.monotonic() - t0)
            raise
        except Exception as exc:
            log.exception(f"Unexpected failure scanning {item}")
            result = ScanResult(item, ProbeOutcome.error(repr(exc)),
                                BannerResult.NOT_ATTEMPTED, time.monotonic() - t0)
        except BaseException as exc:
            # re-raised by scan() once the other items have drained
            run.failure = exc
        finally:
            run.slots.release()
            run.in_flight -= 1
            if run.in_flight == 0:
                run.idle.set()
            # None only when run.failure is set
            if result is not None:
                run.aggregator.record(result)
                run.progress.advance()

    async def _scan_item(self, run: _ScanRun, item: WorkItem) -> ScanResult:
        attempt = await self._probe(item, self.config.connect_timeout)
        outcome = attempt.outcome
        conn = attempt.connection

        if outcome.resource_exhausted:
            run.backoff_until = time.monotonic() + EXHAUSTION_BACKOFF_S

        banner = BannerResult.NOT_ATTEMPTED
        if conn is not None:
            try:
                if outcome.is_open and self.config.banner_enabled:
                    banner = await self._read_banner(conn, self.config.banner_timeout)
                    log.debug(f"{item} banner: {banner.text!r}")
            except Exception as exc:
                # banner failures never touch the probe's classification
                log.debug(f"{item} banner read failed: {exc!r}")
                banner = BannerResult.EMPTY
            finally:
                await conn.close()

        if outcome.is_open:
            log.debug(f"{item} open ({attempt.elapsed * 1000:.1f}ms)")
        return ScanResult(item, outcome, banner, attempt.elapsed)

    # ── Completion ────────────────────────────────────────────────────────────

    async def _drain(self, run: _ScanRun) -> None:
        """Wait for in-flight items; on cancel, grant the grace period then cut."""
        if not run.tasks:
            return
        idle = asyncio.ensure_future(run.idle.wait())
        stop = asyncio.ensure_future(self._cancel.wait())
        try:
            await asyncio.wait({idle, stop}, return_when=asyncio.FIRST_COMPLETED)
            if not idle.done():
                await asyncio.wait({idle}, timeout=self._grace)
        finally:
            idle.cancel()
            stop.cancel()

        pending = [t for t in run.tasks if not t.done()]
        if pending:
            log.debug(f"Force-closing {len(pending)} in-flight items")
            for t in pending:
                t.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
