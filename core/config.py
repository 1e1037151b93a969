"""
core/config.py
Scan configuration: the immutable ScanConfig, duration parsing for the
``--timeout`` style flags, and the optional YAML defaults file.

config.yaml layout:

    scan:
      concurrency: 512
      timeout: 800ms
      banner: false
      banner_timeout: 1.2
      progress_interval: 0.5
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from utils.constants import (
    DEFAULT_BANNER_TIMEOUT_S, DEFAULT_CONCURRENCY, DEFAULT_CONNECT_TIMEOUT_S,
)
from utils.validators import validate_positive


class ConfigError(ValueError):
    """Raised for any invalid scan setting; fatal before scanning starts."""


_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*(ms|s|m)?\s*$", re.IGNORECASE)
_UNIT_DIVISOR = {"ms": 1000.0, "s": 1.0, "m": 1 / 60}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    ``0.8`` / ``"0.8"`` are seconds; ``"800ms"``, ``"2s"`` and ``"1m"`` carry
    explicit units. Zero and negative values are rejected.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        m = _DURATION_RE.match(value)
        if not m:
            raise ConfigError(
                f"Invalid duration {value!r} (expected seconds or a ms/s/m suffix)"
            )
        seconds = float(m.group(1)) / _UNIT_DIVISOR[(m.group(2) or "s").lower()]
    else:
        raise ConfigError(f"Invalid duration type: {type(value).__name__}")

    if seconds <= 0:
        raise ConfigError(f"Duration must be > 0, got {value!r}")
    return seconds


@dataclass(frozen=True)
class ScanConfig:
    concurrency:     int = DEFAULT_CONCURRENCY
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_S
    banner_timeout:  float = DEFAULT_BANNER_TIMEOUT_S
    banner_enabled:  bool = False

    def __post_init__(self):
        for name, value, integer in (
            ("concurrency", self.concurrency, True),
            ("connect_timeout", self.connect_timeout, False),
            ("banner_timeout", self.banner_timeout, False),
        ):
            ok, msg = validate_positive(value, name, integer=integer)
            if not ok:
                raise ConfigError(msg)

    @classmethod
    def from_mapping(
        cls, data: Optional[Dict[str, Any]], **overrides: Any
    ) -> "ScanConfig":
        """
        Build from a ``scan:`` config section; non-None ``overrides`` win.
        Durations may be strings with units.
        """
        data = dict(data or {})
        data.update({k: v for k, v in overrides.items() if v is not None})

        unknown = set(data) - {
            "concurrency", "timeout", "banner", "banner_timeout", "progress_interval",
        }
        if unknown:
            raise ConfigError(f"Unknown scan settings: {sorted(unknown)}")

        kwargs: Dict[str, Any] = {}
        if "concurrency" in data:
            kwargs["concurrency"] = data["concurrency"]
        if "timeout" in data:
            kwargs["connect_timeout"] = parse_duration(data["timeout"])
        if "banner_timeout" in data:
            kwargs["banner_timeout"] = parse_duration(data["banner_timeout"])
        if "banner" in data:
            kwargs["banner_enabled"] = bool(data["banner"])
        return cls(**kwargs)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read the YAML defaults file. A missing file is an empty config."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    scan = data.get("scan") or {}
    if not isinstance(scan, dict):
        raise ConfigError(f"{path}: 'scan' must be a mapping")
    return data
