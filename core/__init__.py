"""
PortProbe Core — Public API

from core import ScanEngine, ScanConfig, build_work_items, expand_targets, parse_ports
"""
from core.aggregator     import ResultAggregator, AggregatorError
from core.banner         import read_banner
from core.config         import ScanConfig, ConfigError, parse_duration, load_config
from core.models         import (WorkItem, ProbeOutcome, BannerResult, ScanResult,
                                 ScanReport, ScanProgress)
from core.port_parser    import PortParser, parse_ports, top_ports, PortParseError
from core.prober         import probe, ProbeAttempt, Connection
from core.progress       import ProgressTracker
from core.scanner_engine import ScanEngine
from core.targets        import expand_targets, build_work_items, TargetError

__all__ = [
    "ScanEngine", "ScanConfig", "ConfigError", "parse_duration", "load_config",
    "WorkItem", "ProbeOutcome", "BannerResult", "ScanResult", "ScanReport",
    "ScanProgress", "ResultAggregator", "AggregatorError", "ProgressTracker",
    "probe", "ProbeAttempt", "Connection", "read_banner",
    "PortParser", "parse_ports", "top_ports", "PortParseError",
    "expand_targets", "build_work_items", "TargetError",
]
