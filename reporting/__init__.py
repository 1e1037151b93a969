"""PortProbe Reporting — Public API

Writes JSON and TXT reports from a ScanReport summary dict.

Usage:
    from reporting import ReportGenerator
    gen = ReportGenerator()
    path = gen.generate(report.summary(target), "scan.json", fmt="json")
"""
from reporting.report_generator import ReportGenerator, render_txt, format_record

__all__ = [
    "ReportGenerator",
    "render_txt",
    "format_record",
]
