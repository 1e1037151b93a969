#!/usr/bin/env python3
"""
PortProbe v1.0 — Async TCP Port Scanner
main.py — CLI entry point

Usage:
  python3 main.py 192.168.1.1
  python3 main.py 192.168.1.0/24 --top-ports 100 --concurrency 1000
  python3 main.py scanme.example.org -p 1-1024 --timeout 300ms --banner
  python3 main.py 10.0.0.5 -p 22,80,443 --json scan.json -o scan.txt
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from core.config import ConfigError, ScanConfig, load_config, parse_duration
from core.models import ScanProgress, ScanReport
from core.port_parser import PortParseError, PortParser
from core.scanner_engine import ScanEngine
from core.targets import TargetError, build_work_items, expand_targets
from reporting.report_generator import ReportGenerator, format_record
from utils.constants import DEFAULT_PORTS, MAX_SAFE_ITEMS, PROGRESS_INTERVAL_S, PortState
from utils.logger import get_logger, set_verbosity

log = get_logger("portprobe")


def _loop_factory():
    # uvloop gives 2-4× connect throughput on Linux/macOS
    try:
        import uvloop
    except ImportError:
        return None
    return uvloop.new_event_loop


# ─── Terminal output ──────────────────────────────────────────────────────────

class ProgressPrinter:
    """Single-line progress counter on stderr."""

    def __init__(self):
        self._shown = False

    def __call__(self, snap: ScanProgress) -> None:
        pct = snap.fraction * 100
        print(f"\r[*] {snap.attempted}/{snap.total} ({pct:5.1f}%)  {snap.rate:,.0f} ports/s   ",
              end="", file=sys.stderr, flush=True)
        self._shown = True

    def finish(self) -> None:
        if self._shown:
            print(file=sys.stderr)


def print_report(report: ScanReport, target: str, show_all: bool) -> None:
    counts = report.counts()
    rate = len(report) / report.elapsed if report.elapsed > 0 else 0
    print(f"\n{'═'*60}")
    print(f"  SCAN {'CANCELLED' if report.cancelled else 'COMPLETE'}: {target}")
    print(f"{'─'*60}")
    print(f"  Ports scanned : {len(report)}")
    print(f"  Open          : {counts[PortState.OPEN]}")
    print(f"  Closed        : {counts[PortState.CLOSED]}")
    print(f"  Filtered      : {counts[PortState.FILTERED]}")
    print(f"  Errors        : {counts[PortState.ERROR]}")
    print(f"  Duration      : {report.elapsed:.2f}s")
    print(f"  Rate          : {rate:.0f} ports/sec")
    print(f"{'═'*60}\n")

    shown = report.results if show_all else report.open_results()
    for r in shown:
        print(f"  {format_record(r.to_record(), banner_width=60)}")
    if shown:
        print()


# ─── Core scan runner ─────────────────────────────────────────────────────────

async def _run_scan(engine: ScanEngine, items) -> ScanReport:
    """Run the engine with SIGINT/SIGTERM mapped to a graceful cancel."""
    loop = asyncio.get_running_loop()
    installed: List[int] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, engine.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Windows / non-main thread: Ctrl-C falls back to KeyboardInterrupt
            pass
    try:
        return await engine.scan(items)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _build_config(args: argparse.Namespace, file_cfg: dict) -> ScanConfig:
    return ScanConfig.from_mapping(
        file_cfg.get("scan"),
        concurrency=args.concurrency,
        timeout=args.timeout,
        banner=True if args.banner else None,
        banner_timeout=args.banner_timeout,
    )


# ─── CLI ─────────────────────────────────────────────────────────────────────

def build_cli() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="portprobe",
        description="PortProbe v1.0 — Async TCP Port Scanner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Port specs:   80  |  80,443  |  1-1000  |  top100  |  - (all)
Durations:    0.8  |  800ms  |  2s

Examples:
  %(prog)s 192.168.1.1
  %(prog)s 192.168.1.0/24 --top-ports 100 -c 1000
  %(prog)s 10.0.0.5 -p 1-65535 --timeout 300ms
  %(prog)s 10.0.0.5 -p 21,22,25,80 --banner --json scan.json
""",
    )
    ap.add_argument("target", help="IP, hostname, CIDR, or a comma-separated list")

    s = ap.add_argument_group("Scan")
    s.add_argument("-p", "--ports",       metavar="SPEC",
                   help=f"Port spec (default: {DEFAULT_PORTS} unless --top-ports)")
    s.add_argument("--top-ports",         metavar="N", type=int,
                   help="Add the N most common TCP ports")
    s.add_argument("-c", "--concurrency", metavar="N", type=int,
                   help="Max connections in flight (default: 512)")
    s.add_argument("-t", "--timeout",     metavar="DUR",
                   help="Connect timeout (default: 800ms)")
    s.add_argument("--banner",            action="store_true", help="Read service banners")
    s.add_argument("--banner-timeout",    metavar="DUR",
                   help="Banner read budget (default: 1200ms)")

    o = ap.add_argument_group("Output")
    o.add_argument("--json",              metavar="PATH", help="Write JSON report")
    o.add_argument("-o", "--output",      metavar="PATH", help="Write TXT report")
    o.add_argument("-v", "--verbosity",   default="normal",
                   choices=["quiet", "normal", "verbose", "debug"])
    o.add_argument("-q", "--quiet",       action="store_true",
                   help="No progress output; list open ports only")

    ap.add_argument("--config",    default="config.yaml", metavar="FILE")
    ap.add_argument("--version",   action="version", version="PortProbe 1.0")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap   = build_cli()
    args = ap.parse_args(argv)

    set_verbosity("quiet" if args.quiet and args.verbosity == "normal" else args.verbosity)

    try:
        file_cfg = load_config(args.config)
        config   = _build_config(args, file_cfg)
        interval = parse_duration(
            (file_cfg.get("scan") or {}).get("progress_interval", PROGRESS_INTERVAL_S)
        )
        ports    = PortParser().combine(
            DEFAULT_PORTS if args.ports is None and args.top_ports is None else args.ports,
            args.top_ports,
        )
        hosts    = expand_targets(args.target)
    except (ConfigError, PortParseError, TargetError) as exc:
        log.error(str(exc))
        return 1

    items = build_work_items(hosts, ports)
    if len(items) > MAX_SAFE_ITEMS:
        log.warning(f"{len(items)} probes requested; this will take a while")

    log.info(f"Target   : {args.target}  ({len(hosts)} host{'s' if len(hosts) != 1 else ''})")
    log.info(f"Ports    : {len(ports)}")
    log.info(f"Workers  : {config.concurrency}  timeout {config.connect_timeout * 1000:.0f}ms")
    log.info(f"Banners  : {'yes' if config.banner_enabled else 'no'}")

    printer = None if args.quiet else ProgressPrinter()
    engine  = ScanEngine(config, progress_cb=printer, progress_interval=interval)

    factory = _loop_factory()
    try:
        with asyncio.Runner(loop_factory=factory) as runner:
            report = runner.run(_run_scan(engine, items))
    except KeyboardInterrupt:
        print("\n  [!] Interrupted by user", file=sys.stderr)
        return 130
    finally:
        if printer:
            printer.finish()

    print_report(report, args.target, show_all=args.verbosity in ("verbose", "debug"))

    summary = report.summary(args.target)
    gen = ReportGenerator()
    for path, fmt in ((args.json, "json"), (args.output, "txt")):
        if path:
            written = gen.generate(summary, path, fmt)
            if written:
                log.info(f"Saved {fmt.upper()}: {written}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
