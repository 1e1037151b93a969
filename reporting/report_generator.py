"""
reporting/report_generator.py
Write scan summaries as JSON or plain-text reports.

Input is the summary dict produced by ScanReport.summary():
  {target, scanned_ports, open_ports, closed_ports, filtered_ports,
   error_ports, total_time_ms, cancelled, results: [record, ...]}
with each record shaped {host, port, state, banner, elapsed_ms}.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Union

from utils.constants import WELL_KNOWN_SERVICES
from utils.logger import get_logger
from utils.validators import sanitize_banner

log = get_logger("portprobe.reporting")

VERSION = "1.0"


def service_label(port: int) -> str:
    return WELL_KNOWN_SERVICES.get(port, "-")


def format_record(rec: dict, banner_width: int = 120) -> str:
    """One TXT line per record."""
    banner = sanitize_banner(rec.get("banner") or "", max_length=banner_width) or "-"
    return (
        f"{rec['host']:<15} Port {rec['port']:>5} | {rec['state']:<8} | "
        f"Service: {service_label(rec['port']):<14} | "
        f"{rec['elapsed_ms']:>8.1f}ms | Banner: {banner}"
    )


def render_txt(summary: dict, records: Optional[Iterable[dict]] = None) -> str:
    """Plain-text report body. ``records`` overrides the summary's result list."""
    rows = summary["results"] if records is None else list(records)
    lines = [
        f"Scan of {summary['target']} | Ports: {summary['scanned_ports']} | "
        f"Time: {summary['total_time_ms']}ms"
        + (" | CANCELLED" if summary.get("cancelled") else ""),
        f"Open: {summary['open_ports']}  Closed: {summary['closed_ports']}  "
        f"Filtered: {summary['filtered_ports']}  Errors: {summary['error_ports']}",
        "",
    ]
    lines.extend(format_record(r) for r in rows)
    return "\n".join(lines) + "\n"


# ─── Report Generator ────────────────────────────────────────────────────────

class ReportGenerator:
    """
    Generate reports in JSON or TXT format.
    Layering: works on plain summary dicts; does NOT import core.
    """

    FORMATS = ("json", "txt")

    def generate(self, summary: dict, path: Union[str, Path], fmt: str = "json") -> Optional[str]:
        """
        Write ``summary`` to ``path``.

        Returns:
            Path written, or None on error (the error is logged).
        """
        path = Path(path)
        try:
            if fmt == "json":
                return self._json(summary, path)
            elif fmt == "txt":
                return self._txt(summary, path)
            else:
                raise ValueError(f"Unknown format: {fmt}")
        except (OSError, ValueError, TypeError) as exc:
            log.error(f"Report generation failed ({path}): {exc}")
            return None

    # ── JSON ─────────────────────────────────────────────────────────────────

    def _json(self, summary: dict, path: Path) -> str:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump({
                "report_generated": datetime.now(timezone.utc).isoformat(),
                "portprobe_version": VERSION,
                **summary,
            }, f, indent=2)
        return str(path)

    # ── TXT ──────────────────────────────────────────────────────────────────

    def _txt(self, summary: dict, path: Path) -> str:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(render_txt(summary))
        return str(path)
